"""Photo upload pipeline.

Store object -> resolve public URL -> record Upload row. If recording fails
the stored object is deleted again, so a failed upload leaves nothing behind.
"""
import logging
import time
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from davaoclean.config import settings
from davaoclean.database import commit_or_raise
from davaoclean.models.profile import Profile
from davaoclean.models.upload import EVENT_PHOTO_CATEGORY, Upload
from davaoclean.services.event_service import get_event_or_404
from davaoclean.storage import (
    EVENT_IMAGES_BUCKET,
    WASTE_IMAGES_BUCKET,
    LocalObjectStorage,
    StorageError,
    sanitize_filename,
    split_key,
)

logger = logging.getLogger(__name__)


def read_image(fileobj) -> bytes:
    """Read at most one byte past MAX_UPLOAD_BYTES; check_image rejects the excess."""
    return fileobj.read(settings.MAX_UPLOAD_BYTES + 1)


def check_image(content_type: Optional[str], data: bytes) -> None:
    if not content_type or not content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files can be uploaded")
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds {settings.MAX_UPLOAD_BYTES} bytes",
        )


def build_storage_path(scope: str, user_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    """``<scope>/<user_id>/<epoch_ms>_<filename>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{scope}/{user_id}/{now_ms}_{sanitize_filename(filename)}"


def _store_and_record(
    db: Session,
    storage: LocalObjectStorage,
    bucket: str,
    path: str,
    data: bytes,
    upload: Upload,
) -> Upload:
    try:
        storage.upload(bucket, path, data)
    except StorageError as e:
        logger.error("Storage upload failed for %s/%s: %s", bucket, path, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    upload.image_url = storage.get_public_url(bucket, path)
    upload.storage_path = f"{bucket}/{path}"
    db.add(upload)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Recording upload failed, removing stored object %s/%s", bucket, path)
        try:
            storage.remove(bucket, path)
        except StorageError as cleanup_error:
            logger.error("Compensating delete of %s/%s failed: %s", bucket, path, cleanup_error)
        raise HTTPException(status_code=400, detail=str(getattr(e, "orig", None) or e)) from e

    db.refresh(upload)
    return upload


def upload_event_photo(
    db: Session,
    storage: LocalObjectStorage,
    event_id: str,
    uploader: Profile,
    filename: str,
    content_type: Optional[str],
    data: bytes,
) -> Upload:
    get_event_or_404(db, event_id)
    check_image(content_type, data)

    path = build_storage_path(event_id, uploader.id, filename)
    upload = Upload(user_id=uploader.id, category=EVENT_PHOTO_CATEGORY, event_id=event_id)
    upload = _store_and_record(db, storage, EVENT_IMAGES_BUCKET, path, data, upload)
    logger.info("Profile %s uploaded photo %s to event %s", uploader.id, upload.id, event_id)
    return upload


def record_classified_photo(
    db: Session,
    storage: LocalObjectStorage,
    uploader: Profile,
    category: str,
    filename: str,
    data: bytes,
) -> Upload:
    """Keep a classified waste photo, tagged with its label and no event."""
    path = build_storage_path("classified", uploader.id, filename)
    upload = Upload(user_id=uploader.id, category=category, event_id=None)
    upload = _store_and_record(db, storage, WASTE_IMAGES_BUCKET, path, data, upload)
    logger.info("Profile %s saved classified photo %s as %s", uploader.id, upload.id, category)
    return upload


def delete_upload(db: Session, storage: LocalObjectStorage, upload_id: str, actor: Profile) -> None:
    """Only the uploader may delete; removes the row and then the stored object."""
    upload = db.query(Upload).filter(Upload.id == upload_id).first()
    if not upload:
        raise HTTPException(status_code=404, detail="Upload not found")
    if upload.user_id != actor.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the uploader may delete this photo")

    key = upload.storage_path
    db.delete(upload)
    commit_or_raise(db)
    logger.info("Deleted upload %s", upload_id)

    if key:
        try:
            storage.remove(*split_key(key))
        except StorageError as e:
            logger.warning("Could not remove stored object %s: %s", key, e)
