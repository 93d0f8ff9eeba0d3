"""Blob store for uploaded files: local directory by default, GCS when configured."""
from __future__ import annotations

import logging
import os
import uuid
from datetime import timedelta

from sqlalchemy.orm import Session

from eventtix.core.config import settings
from eventtix.core.errors import StorageError
from eventtix.models.media import MediaFile

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "application/pdf": ".pdf",
}


def _use_gcs() -> bool:
    return bool(settings.GCS_BUCKET_NAME and settings.GOOGLE_APPLICATION_CREDENTIALS)


def _gcs_bucket():
    try:
        from google.cloud import storage  # type: ignore
    except ImportError as e:
        raise RuntimeError("google-cloud-storage is not installed. Install the gcs extra and retry") from e
    client = storage.Client()
    return client.bucket(settings.GCS_BUCKET_NAME)


def store_bytes(*, folder: str, file_id: str, content: bytes, mime_type: str) -> tuple[str, str]:
    """Store content and return (storage_backend, object_key)."""
    name = file_id + _EXTENSIONS.get(mime_type, "")
    if _use_gcs():
        object_key = f"{folder}/{name}"
        blob = _gcs_bucket().blob(object_key)
        blob.upload_from_string(content, content_type=mime_type)
        return "gcs", object_key

    base = os.path.join(settings.MEDIA_LOCAL_DIR or "./data/media", folder)
    os.makedirs(base, exist_ok=True)
    object_key = os.path.join(base, name)
    with open(object_key, "wb") as f:
        f.write(content)
    return "local", object_key


def save_upload(db: Session, *, folder: str, filename: str, content: bytes, mime_type: str,
                alt: str = "", is_public: bool = False) -> MediaFile:
    """Persist an uploaded file and add its MediaFile row to the session (not committed).

    Raises StorageError when the backend write fails; nothing is added to the session then.
    """
    file_id = str(uuid.uuid4())
    try:
        backend, object_key = store_bytes(folder=folder, file_id=file_id, content=content, mime_type=mime_type)
    except Exception as e:
        logger.exception("Storing %s upload %r failed", folder, filename)
        raise StorageError() from e

    media = MediaFile(
        id=file_id,
        storage_backend=backend,
        object_key=object_key,
        filename=filename or "",
        mime_type=mime_type or "application/octet-stream",
        size=len(content),
        alt=alt,
        is_public=is_public,
    )
    db.add(media)
    logger.info("Stored %s upload %s (%d bytes, backend=%s)", folder, file_id, len(content), backend)
    return media


def signed_url(media: MediaFile, minutes: int = 20) -> str:
    """Short-lived download URL for a GCS object."""
    blob = _gcs_bucket().blob(media.object_key)
    return blob.generate_signed_url(expiration=timedelta(minutes=minutes), method="GET")
