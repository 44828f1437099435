"""S3-compatible object storage for artwork and audio uploads, backed by the MinIO client.

Files never pass through the API: the client asks for a presigned PUT URL,
uploads directly to the bucket and then attaches the returned download URL to
the release or track.
"""
import logging
import os
import re
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from minio import Minio
from minio.error import MinioException

from app.core.config import settings
from app.core.exceptions import StorageError, StorageUnavailableError, ValidationError
from app.schemas.upload import PresignRequest, PresignResponse
from app.services.release_validation import validate_artwork, validate_audio

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_storage_client() -> Minio:
    """Build and cache a MinIO client for object storage."""
    return Minio(
        endpoint=settings.S3_ENDPOINT,
        access_key=settings.S3_ACCESS_KEY,
        secret_key=settings.S3_SECRET_KEY,
        secure=settings.S3_SECURE,
        region=settings.S3_REGION,
    )


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def build_object_key(kind: str, filename: str, now: Optional[datetime] = None) -> str:
    """``artwork/1718000000000-cover-art.png``: millisecond timestamp plus the sanitized name."""
    stem, extension = os.path.splitext(os.path.basename(filename))
    stem = _UNSAFE_CHARS.sub("-", stem).strip("-").lower() or "file"
    timestamp = int((now or datetime.now(timezone.utc)).timestamp() * 1000)
    return f"{kind}/{timestamp}-{stem[:100]}{extension.lower()}"


def create_presigned_upload(request: PresignRequest, owner_id: uuid.UUID) -> PresignResponse:
    """
    Checks the declared file against the artwork or audio rules and hands out a
    presigned upload URL plus the matching download URL.
    """
    if not settings.STORAGE_ENABLED:
        raise StorageUnavailableError()

    if request.kind == "artwork":
        errors = validate_artwork(
            filename=request.filename,
            content_type=request.content_type,
            size=request.size,
            width=request.width,
            height=request.height,
        )
    else:
        errors = validate_audio(
            filename=request.filename,
            content_type=request.content_type,
            size=request.size,
        )
    if errors:
        raise ValidationError(errors, message=f"File does not meet the {request.kind} requirements")

    key = build_object_key(request.kind, request.filename)
    expires = timedelta(seconds=settings.UPLOAD_URL_EXPIRE_SECONDS)
    try:
        client = get_storage_client()
        if not client.bucket_exists(settings.S3_BUCKET):
            client.make_bucket(settings.S3_BUCKET)
        upload_url = client.presigned_put_object(settings.S3_BUCKET, key, expires=expires)
        download_url = client.presigned_get_object(settings.S3_BUCKET, key, expires=expires)
    except MinioException as error:
        logger.error(f"Could not presign upload for {key}: {error}", exc_info=True)
        raise StorageError("create upload URL") from error

    logger.info(f"Presigned {request.kind} upload {key} for user {owner_id}")
    return PresignResponse(
        upload_url=upload_url,
        download_url=download_url,
        key=key,
        content_type=request.content_type,
        original_filename=request.filename,
        size=request.size,
    )
