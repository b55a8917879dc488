"""Organizer-side participant management."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from davaoclean.database import get_db
from davaoclean.dependencies import require_viewer
from davaoclean.models.profile import Profile
from davaoclean.schemas.participant import ParticipantOut, ParticipantStatusUpdate
from davaoclean.services import participation_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.patch("/{participant_id}", response_model=ParticipantOut)
def set_participant_status(
    participant_id: str,
    payload: ParticipantStatusUpdate,
    viewer: Profile = Depends(require_viewer),
    db: Session = Depends(get_db),
):
    """Accept or decline a participant (event organizer only)."""
    return participation_service.set_status(db, participant_id, payload.status, viewer)


@router.delete("/{participant_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_participant(participant_id: str, viewer: Profile = Depends(require_viewer), db: Session = Depends(get_db)):
    participation_service.remove_participant(db, participant_id, viewer)
