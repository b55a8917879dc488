"""Waste classifier routes."""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from davaoclean.config import settings
from davaoclean.database import get_db
from davaoclean.dependencies import get_viewer
from davaoclean.models.profile import Profile
from davaoclean.schemas.classifier import ClassificationOut
from davaoclean.services import upload_service
from davaoclean.services.classifier_service import ClassificationError, category_guide, get_classifier
from davaoclean.storage import LocalObjectStorage, get_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/classify", response_model=ClassificationOut)
async def classify_waste(
    file: UploadFile = File(...),
    save: bool = Query(False, description="Keep the photo in your uploads (signed-in users)"),
    viewer: Optional[Profile] = Depends(get_viewer),
    classifier=Depends(get_classifier),
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
):
    """Classify one waste photo and return its category with disposal instructions."""
    data = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    upload_service.check_image(file.content_type, data)
    filename = file.filename or "image"

    try:
        category = await asyncio.wait_for(
            classifier.classify(data, filename, file.content_type),
            timeout=settings.CLASSIFIER_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as e:
        raise HTTPException(status_code=504, detail="Classifier timed out") from e
    except ClassificationError as e:
        logger.error("Classification failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e)) from e

    logger.info("Classified %s as %s", filename, category.value)
    result = category_guide(category)

    if save:
        if viewer is None:
            raise HTTPException(status_code=401, detail="Sign in to save classified photos")
        result["upload"] = await run_in_threadpool(
            upload_service.record_classified_photo, db, storage, viewer, category.value, filename, data,
        )
    return result
