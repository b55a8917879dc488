"""Profile and AuthSession ORM models."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from davaoclean.database import Base


class Role(str, enum.Enum):
    volunteer = "volunteer"
    organizer = "organizer"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False, default="")
    role = Column(SAEnum(Role), nullable=False, default=Role.volunteer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sessions = relationship("AuthSession", back_populates="profile", cascade="all, delete-orphan")

    @property
    def is_organizer(self) -> bool:
        return self.role == Role.organizer


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    token = Column(String(64), primary_key=True)
    profile_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile", back_populates="sessions")
