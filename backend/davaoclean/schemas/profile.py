"""Pydantic schemas for Profiles."""
from datetime import datetime
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel

from davaoclean.models.profile import Role
from davaoclean.timeutil import ensure_utc

UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class ProfileOut(BaseModel):
    id: str
    email: str
    role: Role
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None

    model_config = {"from_attributes": True}
