"""Event ORM model."""
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from davaoclean.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organizer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(500), nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=False, index=True)  # UTC
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    participants = relationship("Participant", back_populates="event", cascade="all, delete-orphan")
    uploads = relationship("Upload", back_populates="event", cascade="all, delete-orphan")
