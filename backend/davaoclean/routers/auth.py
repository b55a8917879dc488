"""Sign-up / sign-in / sign-out and session resolution routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from davaoclean.database import get_db
from davaoclean.dependencies import get_bearer_token, get_viewer
from davaoclean.models.profile import Profile
from davaoclean.schemas.auth import CurrentSessionOut, SessionOut, SignInPayload, SignUpPayload
from davaoclean.schemas.profile import ProfileOut
from davaoclean.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/sign-up", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpPayload, db: Session = Depends(get_db)):
    """Create a volunteer profile and return a session token."""
    token, profile = auth_service.sign_up(db, payload.email, payload.password)
    return SessionOut(access_token=token, profile=ProfileOut.model_validate(profile))


@router.post("/sign-in", response_model=SessionOut)
def sign_in(payload: SignInPayload, db: Session = Depends(get_db)):
    token, profile = auth_service.sign_in(db, payload.email, payload.password)
    return SessionOut(access_token=token, profile=ProfileOut.model_validate(profile))


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(token: Optional[str] = Depends(get_bearer_token), db: Session = Depends(get_db)):
    if token:
        auth_service.sign_out(db, token)


@router.get("/session", response_model=CurrentSessionOut)
def current_session(viewer: Optional[Profile] = Depends(get_viewer)):
    """Resolve the bearer token to a profile; null when signed out."""
    return CurrentSessionOut(profile=ProfileOut.model_validate(viewer) if viewer else None)
