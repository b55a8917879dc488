"""Upload routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from davaoclean.database import get_db
from davaoclean.dependencies import require_viewer
from davaoclean.models.profile import Profile
from davaoclean.models.upload import Upload
from davaoclean.schemas.upload import UploadOut
from davaoclean.services import upload_service
from davaoclean.storage import LocalObjectStorage, get_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/mine", response_model=list[UploadOut])
def list_my_uploads(viewer: Profile = Depends(require_viewer), db: Session = Depends(get_db)):
    """The caller's uploads, newest first."""
    return db.query(Upload).filter(Upload.user_id == viewer.id).order_by(Upload.created_at.desc()).all()


@router.delete("/{upload_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_upload(
    upload_id: str,
    viewer: Profile = Depends(require_viewer),
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
):
    """Delete one of your own uploads."""
    upload_service.delete_upload(db, storage, upload_id, viewer)
