"""Pydantic schemas for sign-up, sign-in and session resolution."""
from typing import Optional
from pydantic import BaseModel, field_validator

from davaoclean.schemas.profile import ProfileOut

MIN_PASSWORD_LENGTH = 6


class SignInPayload(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("A valid email address is required")
        return value


class SignUpPayload(SignInPayload):
    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: ProfileOut


class CurrentSessionOut(BaseModel):
    """Resolved identity for the bearer token; ``profile`` is null when signed out."""

    profile: Optional[ProfileOut] = None
