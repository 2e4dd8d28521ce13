# app/services/storage_service.py
"""
Vehicle photo uploads to Google Cloud Storage.

Uploads are best-effort: when the bucket is not configured or the upload
fails, the caller gets None and carries on without a photo.
Saves to: gs://{GCS_BUCKET_NAME}/uploads/{timestamp}-{random}{ext}
"""

import json
import os
import random
import time
from typing import Optional

from google.cloud import storage
from google.oauth2 import service_account

from app.config import settings
from app.services.errors import InvalidInput
from app.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/jpg"}
PUBLIC_URL = "https://storage.googleapis.com/{bucket}/{name}"

_client = None


def validate_image(data: bytes, content_type: str):
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidInput("Only JPEG, PNG or WEBP images are accepted")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise InvalidInput(f"Image larger than {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB")


def _get_client():
    """Lazily build the GCS client from the service-account JSON in settings."""
    global _client
    if _client is None:
        info = json.loads(settings.GCP_SERVICE_ACCOUNT_KEY.strip())
        credentials = service_account.Credentials.from_service_account_info(info)
        _client = storage.Client(project=info.get("project_id"), credentials=credentials)
        logger.info("☁️  Google Cloud Storage client initialised")
    return _client


def _object_name(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    return f"uploads/{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


def upload_image(data: Optional[bytes], content_type: str, filename: str) -> Optional[str]:
    """
    Store an image and return its public URL.
    Returns None when there is nothing to upload or storage is unavailable.
    Raises InvalidInput for a non-image or oversized file.
    """
    if not data:
        return None
    validate_image(data, content_type)

    if not settings.storage_enabled:
        logger.warning("[STORAGE] GCS not configured — vehicle saved without photo")
        return None

    name = _object_name(filename)
    try:
        blob = _get_client().bucket(settings.GCS_BUCKET_NAME).blob(name)
        blob.upload_from_string(data, content_type=content_type, timeout=30)
        blob.make_public()
    except Exception as e:
        logger.error(f"[STORAGE] Upload failed for {name}: {e}")
        return None

    url = PUBLIC_URL.format(bucket=settings.GCS_BUCKET_NAME, name=name)
    logger.info(f"[STORAGE] Uploaded {name} ({len(data)} bytes)")
    return url
