"""Photo ingestion: decode, validate and stage embedded image payloads."""

from __future__ import annotations

import base64
import binascii
import logging
import re
import time
import uuid
from functools import lru_cache
from typing import Any, Protocol

from app.core.config import settings
from app.core.errors import PhotoIngestionError
from utils.photo_storage import LocalPhotoStorage, PhotoBlob, StagedBatch

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[^;]+);base64,(?P<data>.+)$", re.IGNORECASE | re.DOTALL)
MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}
PAYLOAD_FIELD_ALIASES = ("dataUrl", "data_url", "base64", "url")
_WHITESPACE = re.compile(r"\s+")


class PhotoStorage(Protocol):
    def stage(self, blobs: list[PhotoBlob]) -> StagedBatch: ...

    def promote(self, batch: StagedBatch) -> None: ...

    def discard(self, batch: StagedBatch) -> None: ...


def select_items(items: Any, max_photos: int | None = None) -> list[Any]:
    """Drop empty items and keep only the first ``max_photos``; extras are ignored.

    Anything other than a list counts as no photos.
    """
    if not isinstance(items, list):
        return []
    limit = settings.max_photos if max_photos is None else max_photos
    return [item for item in items if item][:limit]


def extract_data_url(item: Any) -> str:
    if isinstance(item, str):
        data_url = item
    elif isinstance(item, dict):
        data_url = next((item[name] for name in PAYLOAD_FIELD_ALIASES if item.get(name)), None)
    else:
        raise PhotoIngestionError("missing_photo", f"unsupported payload type {type(item).__name__}")
    if not data_url or not isinstance(data_url, str):
        raise PhotoIngestionError("missing_photo_data")
    return data_url


def generate_filename(extension: str) -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4()}.{extension}"


def decode_photo(item: Any, max_bytes: int | None = None) -> PhotoBlob:
    """Validate one payload and return its decoded bytes (nothing is written)."""
    max_bytes = settings.max_photo_bytes if max_bytes is None else max_bytes
    match = DATA_URL_PATTERN.match(extract_data_url(item))
    if not match:
        raise PhotoIngestionError("invalid_data_url")

    mime = match.group("mime").strip().lower()
    extension = MIME_EXTENSIONS.get(mime)
    if extension is None:
        raise PhotoIngestionError("unsupported_mime", mime)

    encoded = _WHITESPACE.sub("", match.group("data"))
    encoded += "=" * (-len(encoded) % 4)
    # decoded size is at most 3/4 of the padded text; reject before allocating it
    if len(encoded) * 3 // 4 > max_bytes + 2:
        raise PhotoIngestionError("photo_too_large", f"~{len(encoded) * 3 // 4} bytes")
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PhotoIngestionError("invalid_data_url", str(exc)) from exc

    if not data:
        raise PhotoIngestionError("empty_photo")
    if len(data) > max_bytes:
        raise PhotoIngestionError("photo_too_large", f"{len(data)} bytes")

    return PhotoBlob(filename=generate_filename(extension), content_type=mime, data=data)


def validate_batch(
    items: list[Any] | None,
    max_photos: int | None = None,
    max_bytes: int | None = None,
) -> list[PhotoBlob]:
    """Decode every selected item; the first failure rejects the whole batch."""
    selected = select_items(items, max_photos)
    if not selected:
        raise PhotoIngestionError("missing_photo", "no photos submitted")

    blobs = []
    for index, item in enumerate(selected):
        try:
            blobs.append(decode_photo(item, max_bytes))
        except PhotoIngestionError as exc:
            logger.warning("Rejected photo batch: item %d failed with %s (%s)", index, exc.code, exc.detail)
            raise
    return blobs


def ingest(
    items: list[Any] | None,
    storage: PhotoStorage,
    max_photos: int | None = None,
    max_bytes: int | None = None,
) -> StagedBatch:
    """Validate the batch in memory, then write it to the staging area.

    The caller promotes the returned batch once its place row is flushed and
    discards it if the place transaction fails.
    """
    blobs = validate_batch(items, max_photos, max_bytes)
    batch = storage.stage(blobs)
    logger.info("Staged %d photo(s) in batch %s", len(blobs), batch.batch_id)
    return batch


@lru_cache
def get_photo_storage() -> PhotoStorage:
    """Storage backend selected by ``PHOTO_STORAGE``."""
    if settings.photo_storage == "s3":
        from utils.s3_storage import S3PhotoStorage

        if not settings.s3_bucket:
            raise RuntimeError("S3_BUCKET is not configured.")
        return S3PhotoStorage(
            bucket_name=settings.s3_bucket,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region=settings.aws_region,
        )
    return LocalPhotoStorage(settings.upload_root)
