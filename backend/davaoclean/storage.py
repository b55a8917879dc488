"""Object storage — bucket/path keyed files with public URLs.

The local implementation writes under MEDIA_ROOT, which main.py serves at
MEDIA_URL. Objects are never overwritten (no upsert).
"""
import logging
import os
import re
from pathlib import Path

from davaoclean.config import settings

logger = logging.getLogger(__name__)

EVENT_IMAGES_BUCKET = "event-images"
WASTE_IMAGES_BUCKET = "waste-images"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(Exception):
    """Raised when an object cannot be stored or removed."""


def sanitize_filename(filename: str) -> str:
    """Strip directories and characters that are unsafe in a storage key."""
    name = os.path.basename(filename or "").strip()
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    return name or "image"


class LocalObjectStorage:
    def __init__(self, root: str | Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        target = (self.root / bucket / path).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise StorageError(f"Invalid object path: {path}")
        return target

    def upload(self, bucket: str, path: str, data: bytes) -> None:
        target = self._resolve(bucket, path)
        if target.exists():
            raise StorageError("The resource already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as fh:
                fh.write(data)
        except OSError as e:
            raise StorageError(str(e)) from e
        logger.info("Stored object %s/%s (%d bytes)", bucket, path, len(data))

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{bucket}/{path}"

    def exists(self, bucket: str, path: str) -> bool:
        return self._resolve(bucket, path).is_file()

    def remove(self, bucket: str, path: str) -> None:
        target = self._resolve(bucket, path)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning("Object %s/%s already gone", bucket, path)
        except OSError as e:
            raise StorageError(str(e)) from e
        else:
            logger.info("Removed object %s/%s", bucket, path)


def split_key(key: str) -> tuple[str, str]:
    """Split a stored ``<bucket>/<path>`` key."""
    bucket, _, path = key.partition("/")
    return bucket, path


def get_storage() -> LocalObjectStorage:
    """FastAPI dependency returning the configured storage backend."""
    return LocalObjectStorage(
        settings.MEDIA_ROOT,
        settings.PUBLIC_BASE_URL.rstrip("/") + settings.MEDIA_URL,
    )
