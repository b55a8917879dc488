"""Authentication and session/profile resolution.

Sign-in creates an opaque session token, sign-out revokes it. Every request
re-resolves its token, so a sign-out or role change is visible on the very
next call. A token that cannot be resolved yields no profile and the caller
is treated with least privilege.
"""
import logging
import secrets
from typing import Optional

from fastapi import HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from davaoclean.models.profile import AuthSession, Profile, Role

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _open_session(db: Session, profile: Profile) -> str:
    token = secrets.token_urlsafe(32)
    db.add(AuthSession(token=token, profile_id=profile.id))
    return token


def sign_up(db: Session, email: str, password: str) -> tuple[str, Profile]:
    """Create a volunteer profile and sign it in."""
    if db.query(Profile).filter(Profile.email == email).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    profile = Profile(email=email, password_hash=pwd_context.hash(password), role=Role.volunteer)
    db.add(profile)
    try:
        db.flush()
        token = _open_session(db, profile)
        db.commit()
    except IntegrityError as e:
        # concurrent sign-up took the email first
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered") from e
    db.refresh(profile)
    logger.info("Signed up profile %s (%s)", profile.id, email)
    return token, profile


def sign_in(db: Session, email: str, password: str) -> tuple[str, Profile]:
    profile = db.query(Profile).filter(Profile.email == email).first()
    if not profile or not pwd_context.verify(password, profile.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid login credentials")

    token = _open_session(db, profile)
    db.commit()
    logger.info("Profile %s signed in", profile.id)
    return token, profile


def sign_out(db: Session, token: str) -> None:
    """Revoke a session token. Unknown tokens are ignored."""
    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if session:
        db.delete(session)
        db.commit()
        logger.info("Profile %s signed out", session.profile_id)


def resolve_profile(db: Session, token: Optional[str]) -> Optional[Profile]:
    """Return the profile behind a session token, or None."""
    if not token:
        return None
    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if not session:
        return None
    return db.query(Profile).filter(Profile.id == session.profile_id).first()


def become_organizer(db: Session, profile: Profile) -> Profile:
    """Promote a profile to organizer. Roles only move upward."""
    if profile.role != Role.organizer:
        profile.role = Role.organizer
        db.commit()
        logger.info("Profile %s is now an organizer", profile.id)
    db.refresh(profile)
    return profile
