"""Event routes — catalog, detail, CRUD, join/leave and event photos."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from davaoclean.database import get_db
from davaoclean.dependencies import get_viewer, require_organizer, require_viewer
from davaoclean.models.profile import Profile
from davaoclean.schemas.event import EventDetailOut, EventForm, EventOut, EventSummaryOut
from davaoclean.schemas.participant import ParticipantOut
from davaoclean.schemas.upload import UploadOut
from davaoclean.services import catalog_service, event_service, participation_service, upload_service
from davaoclean.storage import LocalObjectStorage, get_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[EventSummaryOut])
def list_events(viewer: Optional[Profile] = Depends(get_viewer), db: Session = Depends(get_db)):
    """All events by date, with organizer email, participant count and the caller's own row."""
    return catalog_service.list_events(db, viewer)


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fresh snapshot of one event's participants and photos."""
    return catalog_service.get_event_detail(db, event_id)


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventForm,
    organizer: Profile = Depends(require_organizer),
    db: Session = Depends(get_db),
):
    return event_service.create_event(db, payload, organizer)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventForm,
    viewer: Profile = Depends(require_viewer),
    db: Session = Depends(get_db),
):
    """Replace an event's editable fields (owner only)."""
    return event_service.update_event(db, event_id, payload, viewer)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    confirm: bool = Query(False, description="Must be true; deletion cannot be undone"),
    viewer: Profile = Depends(require_viewer),
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
):
    if not confirm:
        raise HTTPException(status_code=400, detail="Deleting an event must be confirmed with confirm=true")
    event_service.delete_event(db, event_id, viewer, storage)


@router.post("/{event_id}/join", response_model=ParticipantOut, status_code=status.HTTP_201_CREATED)
def join_event(event_id: str, viewer: Profile = Depends(require_viewer), db: Session = Depends(get_db)):
    return participation_service.join_event(db, event_id, viewer)


@router.delete("/{event_id}/join", status_code=status.HTTP_204_NO_CONTENT)
def leave_event(event_id: str, viewer: Profile = Depends(require_viewer), db: Session = Depends(get_db)):
    participation_service.leave_event(db, event_id, viewer)


@router.post("/{event_id}/uploads", response_model=UploadOut, status_code=status.HTTP_201_CREATED)
def upload_event_photo(
    event_id: str,
    file: UploadFile = File(...),
    viewer: Profile = Depends(require_viewer),
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
):
    """Store a photo for the event and record it."""
    data = upload_service.read_image(file.file)
    return upload_service.upload_event_photo(
        db, storage, event_id, viewer, file.filename or "image", file.content_type, data,
    )
