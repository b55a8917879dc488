"""Event create/update/delete.

- Only organizers create events; only the owning organizer edits or deletes.
- Forms arrive already validated and UTC-normalized (schemas.event.EventForm).
- Deleting an event removes its participants and uploads, then the stored
  objects behind those uploads.
"""
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from davaoclean.database import commit_or_raise
from davaoclean.models.event import Event
from davaoclean.models.profile import Profile
from davaoclean.schemas.event import EventForm
from davaoclean.storage import LocalObjectStorage, StorageError, split_key

logger = logging.getLogger(__name__)


def get_event_or_404(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def check_owner(event: Event, actor: Profile) -> None:
    """Only the organizer who created the event may change it."""
    if event.organizer_id != actor.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the organizer may modify this event.",
        )


def create_event(db: Session, form: EventForm, organizer: Profile) -> Event:
    event = Event(
        organizer_id=organizer.id,
        title=form.title,
        description=form.description,
        location=form.location,
        event_date=form.event_date,
    )
    db.add(event)
    commit_or_raise(db)
    db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s", event.title, event.id, organizer.id)
    return event


def update_event(db: Session, event_id: str, form: EventForm, actor: Profile) -> Event:
    event = get_event_or_404(db, event_id)
    check_owner(event, actor)

    event.title = form.title
    event.description = form.description
    event.location = form.location
    event.event_date = form.event_date
    commit_or_raise(db)
    db.refresh(event)
    logger.info("Updated event %s", event_id)
    return event


def delete_event(db: Session, event_id: str, actor: Profile, storage: LocalObjectStorage) -> None:
    event = get_event_or_404(db, event_id)
    check_owner(event, actor)

    stored_keys = [u.storage_path for u in event.uploads if u.storage_path]
    participant_count = len(event.participants)
    db.delete(event)
    commit_or_raise(db)
    logger.info(
        "Deleted event %s with %d participants and %d uploads",
        event_id, participant_count, len(stored_keys),
    )

    for key in stored_keys:
        try:
            storage.remove(*split_key(key))
        except StorageError as e:
            logger.warning("Could not remove stored object %s for deleted event %s: %s", key, event_id, e)
