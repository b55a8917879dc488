"""Participant ORM model — one join record per (event, volunteer)."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from davaoclean.database import Base


class ParticipantStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class Participant(Base):
    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("event_id", "volunteer_id", name="uq_participant_event_volunteer"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    volunteer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    status = Column(SAEnum(ParticipantStatus), nullable=False, default=ParticipantStatus.accepted)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="participants")
