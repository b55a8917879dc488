"""Participation transitions: join, leave, set_status, remove.

absent --join--> accepted --leave--> absent
accepted <--set_status--> declined   (event organizer only)
any --remove--> absent               (event organizer only)
"""
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from davaoclean.database import commit_or_raise
from davaoclean.models.participant import Participant, ParticipantStatus
from davaoclean.models.profile import Profile
from davaoclean.services.event_service import check_owner, get_event_or_404

logger = logging.getLogger(__name__)


def _get_participant_or_404(db: Session, participant_id: str) -> Participant:
    participant = db.query(Participant).filter(Participant.id == participant_id).first()
    if not participant:
        raise HTTPException(status_code=404, detail="Participant not found")
    return participant


def join_event(db: Session, event_id: str, volunteer: Profile) -> Participant:
    """Join straight into accepted; a second join by the same volunteer is a 409."""
    get_event_or_404(db, event_id)

    existing = (
        db.query(Participant)
        .filter(Participant.event_id == event_id, Participant.volunteer_id == volunteer.id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already joined this event")

    participant = Participant(
        event_id=event_id,
        volunteer_id=volunteer.id,
        status=ParticipantStatus.accepted,
    )
    db.add(participant)
    try:
        db.commit()
    except IntegrityError as e:
        # concurrent double join lost the race against the unique constraint
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already joined this event") from e
    db.refresh(participant)
    logger.info("Profile %s joined event %s", volunteer.id, event_id)
    return participant


def leave_event(db: Session, event_id: str, volunteer: Profile) -> None:
    participant = (
        db.query(Participant)
        .filter(Participant.event_id == event_id, Participant.volunteer_id == volunteer.id)
        .first()
    )
    if not participant:
        raise HTTPException(status_code=404, detail="Not a participant of this event")
    db.delete(participant)
    commit_or_raise(db)
    logger.info("Profile %s left event %s", volunteer.id, event_id)


def set_status(db: Session, participant_id: str, new_status: str, actor: Profile) -> Participant:
    participant = _get_participant_or_404(db, participant_id)
    check_owner(get_event_or_404(db, participant.event_id), actor)

    participant.status = ParticipantStatus(new_status)
    commit_or_raise(db)
    db.refresh(participant)
    logger.info("Participant %s set to '%s' by %s", participant_id, new_status, actor.id)
    return participant


def remove_participant(db: Session, participant_id: str, actor: Profile) -> None:
    participant = _get_participant_or_404(db, participant_id)
    check_owner(get_event_or_404(db, participant.event_id), actor)

    event_id = participant.event_id
    db.delete(participant)
    commit_or_raise(db)
    logger.info("Participant %s removed from event %s by %s", participant_id, event_id, actor.id)
