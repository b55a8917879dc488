"""Profile routes — current profile and role upgrade."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from davaoclean.database import get_db
from davaoclean.dependencies import require_viewer
from davaoclean.models.profile import Profile
from davaoclean.schemas.profile import ProfileOut
from davaoclean.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me", response_model=ProfileOut)
def get_my_profile(viewer: Profile = Depends(require_viewer)):
    return viewer


@router.post("/me/become-organizer", response_model=ProfileOut)
def become_organizer(viewer: Profile = Depends(require_viewer), db: Session = Depends(get_db)):
    """Promote the signed-in volunteer to organizer. There is no way back."""
    return auth_service.become_organizer(db, viewer)
