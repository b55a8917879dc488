"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional

import pytz
from pydantic import BaseModel, ValidationInfo, field_validator, model_validator

from davaoclean.config import settings
from davaoclean.schemas.participant import ParticipantOut, ParticipantWithEmailOut
from davaoclean.schemas.profile import UtcDatetime
from davaoclean.schemas.upload import UploadWithEmailOut
from davaoclean.timeutil import to_utc


class EventForm(BaseModel):
    """Create/edit form. Rejects blank required fields before any database work.

    A naive ``event_date`` is read in ``timezone`` (or DEFAULT_TIMEZONE) and
    normalized to UTC on construction.
    """

    title: str
    description: str = ""
    location: str
    event_date: datetime
    timezone: Optional[str] = None

    @field_validator("title", "location")
    @classmethod
    def _required(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name} is required")
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @model_validator(mode="after")
    def _normalize_event_date(self) -> "EventForm":
        self.event_date = to_utc(self.event_date, self.timezone or settings.DEFAULT_TIMEZONE)
        return self


class EventOut(BaseModel):
    id: str
    organizer_id: str
    title: str
    description: str
    location: str
    event_date: UtcDatetime
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None

    model_config = {"from_attributes": True}


class EventSummaryOut(EventOut):
    """Catalog row."""

    organizer_email: str
    participant_count: int
    user_participation: Optional[ParticipantOut] = None


class EventDetailOut(EventOut):
    organizer_email: str
    participants: list[ParticipantWithEmailOut] = []
    uploads: list[UploadWithEmailOut] = []


EventSummaryOut.model_rebuild()
EventDetailOut.model_rebuild()
