"""Shared FastAPI dependencies: API key check and viewer resolution."""
import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from davaoclean.config import settings
from davaoclean.database import get_db
from davaoclean.models.profile import Profile
from davaoclean.services import auth_service


def require_api_key(apikey: Optional[str] = Header(None)) -> None:
    """Every /api route except health needs the public API key."""
    if not apikey or not secrets.compare_digest(apikey, settings.PUBLIC_API_KEY):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_viewer(
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> Optional[Profile]:
    """The signed-in profile, or None for anonymous callers."""
    return auth_service.resolve_profile(db, token)


def require_viewer(viewer: Optional[Profile] = Depends(get_viewer)) -> Profile:
    if viewer is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in required")
    return viewer


def require_organizer(viewer: Profile = Depends(require_viewer)) -> Profile:
    if not viewer.is_organizer:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only organizers may create events")
    return viewer
