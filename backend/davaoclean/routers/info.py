"""Informational content routes."""
from fastapi import APIRouter

from davaoclean.schemas.classifier import CategoryGuideOut
from davaoclean.services.classifier_service import WasteCategory, category_guide

router = APIRouter()


@router.get("/categories", response_model=list[CategoryGuideOut])
def list_categories():
    """The four waste categories with disposal instructions and examples."""
    return [category_guide(c) for c in WasteCategory]
