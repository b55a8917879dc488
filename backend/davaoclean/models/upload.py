"""Upload ORM model — event photos and saved classifier photos share this table."""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from davaoclean.database import Base

EVENT_PHOTO_CATEGORY = "event"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Upload(Base):
    __tablename__ = "uploads"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    image_url = Column(String(1000), nullable=False)
    storage_path = Column(String(500), nullable=True)  # "<bucket>/<path>"
    category = Column(String(50), nullable=False)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True, index=True)
    # Python-side default keeps sub-second ordering for newest-first listings.
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    event = relationship("Event", back_populates="uploads")
