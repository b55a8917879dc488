"""Pydantic schemas for the waste classifier and category guide."""
from typing import Optional
from pydantic import BaseModel

from davaoclean.schemas.upload import UploadOut


class CategoryGuideOut(BaseModel):
    category: str
    instructions: str
    collection_schedule: str
    examples: list[str]


class ClassificationOut(CategoryGuideOut):
    upload: Optional[UploadOut] = None
