"""Stockage des images produit sur le disque local."""
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from loguru import logger

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
UPLOADS_PREFIX = "uploads"
CHUNK_SIZE = 64 * 1024


class UploadTooLarge(Exception):
    """Raised when an uploaded file goes over the configured size limit."""

    def __init__(self, limit: int):
        super().__init__(f"File larger than {limit} bytes")
        self.limit = limit


async def read_upload(upload: Optional[UploadFile], limit: int) -> Optional[bytes]:
    """Read an uploaded file, refusing it as soon as it exceeds `limit` bytes.

    Returns None when the request carried no file (or an empty file part).
    """
    if upload is None or not upload.filename:
        return None
    data = bytearray()
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > limit:
            raise UploadTooLarge(limit)
    return bytes(data)


def upload_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp (ms precision, `Z` suffix) with colons replaced."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    stamp = f"{stamp}.{now.microsecond // 1000:03d}Z"
    return stamp.replace(":", "-")


class ImageStore:
    def __init__(self, directory):
        self.directory = Path(directory)

    def ensure_directory(self):
        self.directory.mkdir(parents=True, exist_ok=True)

    def store(self, file_bytes: bytes, original_name: str, mime_type: Optional[str]) -> Optional[str]:
        """Write an accepted image and return its relative path.

        Files with a type outside ALLOWED_MIME_TYPES are dropped without
        error: the caller sees None.
        """
        if mime_type not in ALLOWED_MIME_TYPES:
            logger.warning(f"Upload {original_name!r} rejected: type {mime_type!r} not allowed")
            return None

        # Seul le nom de base est gardé, pas de chemin client
        filename = upload_timestamp() + Path(original_name.replace("\\", "/")).name
        self.ensure_directory()
        (self.directory / filename).write_bytes(file_bytes)
        logger.info(f"Image stored as {filename}", extra={"size": len(file_bytes)})
        return f"{UPLOADS_PREFIX}/{filename}"
