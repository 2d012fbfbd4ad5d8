from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from folio.constants import ALLOWED_IMAGE_TYPES, MAX_UPLOAD_BYTES, MIME_TO_EXT
from folio.errors import BadRequestError
from folio.observability.metrics import UPLOADED_BYTES
from folio.security.utils import generate_secure_token
from folio.services.storage import StorageBackend

logger = logging.getLogger(__name__)

INVALID_TYPE = f"Invalid file type. Allowed types: {', '.join(ALLOWED_IMAGE_TYPES)}"
TOO_LARGE = f"File too large. Maximum size: {MAX_UPLOAD_BYTES // (1024 * 1024)}MB"


@dataclass(frozen=True)
class StoredUpload:
    url: str
    filename: str


def normalize_content_type(content_type: str | None) -> str:
    """Drop parameters such as ``; charset=...`` and lower-case the type."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def validate_image(data: bytes, content_type: str) -> None:
    if content_type not in MIME_TO_EXT:
        raise BadRequestError(INVALID_TYPE)
    if not data or len(data) > MAX_UPLOAD_BYTES:
        raise BadRequestError(TOO_LARGE)


def build_filename(content_type: str, *, now_ms: int | None = None) -> str:
    """``<epoch ms>-<32 random hex chars><ext>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{generate_secure_token(16)}{MIME_TO_EXT[content_type]}"


async def store_image(
    storage: StorageBackend, data: bytes, content_type: str | None
) -> StoredUpload:
    content_type = normalize_content_type(content_type)
    validate_image(data, content_type)
    filename = build_filename(content_type)
    url = await storage.save(data, filename, content_type)
    UPLOADED_BYTES.inc(len(data))
    logger.info("Stored upload %s (%s, %d bytes)", filename, content_type, len(data))
    return StoredUpload(url=url, filename=filename)
