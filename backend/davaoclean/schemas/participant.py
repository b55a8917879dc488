"""Pydantic schemas for Participants."""
from typing import Literal, Optional
from pydantic import BaseModel

from davaoclean.models.participant import ParticipantStatus
from davaoclean.schemas.profile import UtcDatetime


class ParticipantOut(BaseModel):
    id: str
    event_id: str
    volunteer_id: str
    status: ParticipantStatus
    created_at: Optional[UtcDatetime] = None

    model_config = {"from_attributes": True}


class ParticipantWithEmailOut(ParticipantOut):
    email: str


class ParticipantStatusUpdate(BaseModel):
    # pending exists on the record but is never an organizer decision
    status: Literal["accepted", "declined"]
