"""Event catalog and event detail loaders.

The catalog is built from a fixed number of queries (events with organizer
email, one grouped participant count, the viewer's own rows) no matter how
many events exist. Emails that cannot be resolved degrade to "Unknown".
"""
import logging
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from davaoclean.models.event import Event
from davaoclean.models.participant import Participant
from davaoclean.models.profile import Profile
from davaoclean.models.upload import Upload
from davaoclean.services.event_service import get_event_or_404

logger = logging.getLogger(__name__)

UNKNOWN_EMAIL = "Unknown"


def _event_fields(event: Event) -> dict[str, Any]:
    return {
        "id": event.id,
        "organizer_id": event.organizer_id,
        "title": event.title,
        "description": event.description,
        "location": event.location,
        "event_date": event.event_date,
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def list_events(db: Session, viewer: Optional[Profile] = None) -> list[dict[str, Any]]:
    """All events ascending by date, with organizer email, count and the viewer's row."""
    rows = (
        db.query(Event, Profile.email)
        .outerjoin(Profile, Profile.id == Event.organizer_id)
        .order_by(Event.event_date.asc())
        .all()
    )
    event_ids = [event.id for event, _ in rows]

    counts: dict[str, int] = {}
    own: dict[str, Participant] = {}
    if event_ids:
        counts = dict(
            db.query(Participant.event_id, func.count(Participant.id))
            .filter(Participant.event_id.in_(event_ids))
            .group_by(Participant.event_id)
            .all()
        )
        if viewer is not None:
            own = {
                p.event_id: p
                for p in db.query(Participant).filter(
                    Participant.event_id.in_(event_ids),
                    Participant.volunteer_id == viewer.id,
                )
            }

    catalog = [
        {
            **_event_fields(event),
            "organizer_email": email or UNKNOWN_EMAIL,
            "participant_count": counts.get(event.id, 0),
            "user_participation": own.get(event.id),
        }
        for event, email in rows
    ]
    logger.debug("Loaded catalog of %d events for viewer %s", len(catalog), viewer.id if viewer else None)
    return catalog


def get_event_detail(db: Session, event_id: str) -> dict[str, Any]:
    """One event with its participants and its uploads (newest first)."""
    event = get_event_or_404(db, event_id)
    organizer_email = db.query(Profile.email).filter(Profile.id == event.organizer_id).scalar()

    participants = (
        db.query(Participant, Profile.email)
        .outerjoin(Profile, Profile.id == Participant.volunteer_id)
        .filter(Participant.event_id == event_id)
        .order_by(Participant.created_at.asc())
        .all()
    )
    uploads = (
        db.query(Upload, Profile.email)
        .outerjoin(Profile, Profile.id == Upload.user_id)
        .filter(Upload.event_id == event_id)
        .order_by(Upload.created_at.desc())
        .all()
    )

    return {
        **_event_fields(event),
        "organizer_email": organizer_email or UNKNOWN_EMAIL,
        "participants": [
            {
                "id": p.id,
                "event_id": p.event_id,
                "volunteer_id": p.volunteer_id,
                "status": p.status,
                "created_at": p.created_at,
                "email": email or UNKNOWN_EMAIL,
            }
            for p, email in participants
        ],
        "uploads": [
            {
                "id": u.id,
                "user_id": u.user_id,
                "image_url": u.image_url,
                "category": u.category,
                "event_id": u.event_id,
                "created_at": u.created_at,
                "email": email or UNKNOWN_EMAIL,
            }
            for u, email in uploads
        ],
    }
