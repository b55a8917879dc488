"""Pydantic schemas for Uploads."""
from typing import Optional
from pydantic import BaseModel

from davaoclean.schemas.profile import UtcDatetime


class UploadOut(BaseModel):
    id: str
    user_id: str
    image_url: str
    category: str
    event_id: Optional[str] = None
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class UploadWithEmailOut(UploadOut):
    email: str
