"""Storage of uploaded issue photos on local disk."""

import asyncio
import uuid
from pathlib import Path
from typing import Optional

import structlog
from fastapi import UploadFile

from civic_reporter.config import settings
from civic_reporter.core.exceptions import ValidationError
from civic_reporter.utils.validators import file_extension, is_image_content_type

logger = structlog.get_logger()


async def save_image(file: Optional[UploadFile]) -> Optional[str]:
    """
    Write an uploaded photo to the upload directory.

    Args:
        file: Uploaded file, or None when the form had no image

    Returns:
        Public URL path of the stored file, or None if nothing was uploaded

    Raises:
        ValidationError: If the extension is not allowed or the file is too large
    """
    if file is None or not file.filename:
        return None

    extension = file_extension(file.filename)
    if extension not in settings.allowed_image_extensions_set:
        raise ValidationError(
            message="Unsupported image type",
            details=[{
                "field": "image",
                "allowed": sorted(settings.allowed_image_extensions_set),
            }],
        )

    if not is_image_content_type(file.content_type):
        raise ValidationError(
            message="Unsupported image type",
            details=[{"field": "image", "message": f"Content type {file.content_type!r} is not an image"}],
        )

    contents = await file.read(settings.max_upload_bytes + 1)
    if len(contents) > settings.max_upload_bytes:
        raise ValidationError(
            message=f"Image larger than {settings.max_upload_bytes // 1024}KB",
            details=[{"field": "image", "message": "File too large"}],
        )

    filename = f"{uuid.uuid4().hex}.{extension}"
    await asyncio.to_thread(_write_file, Path(settings.upload_dir) / filename, contents)

    logger.info("image_stored", filename=filename, size=len(contents))
    return f"{settings.upload_url_prefix.rstrip('/')}/{filename}"


def _write_file(path: Path, contents: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(contents)


def _stored_path(public_path: str) -> Path:
    return Path(settings.upload_dir) / public_path.rsplit("/", 1)[-1]


async def discard_image(public_path: Optional[str]) -> None:
    """Remove a stored photo whose issue was never saved."""
    if not public_path:
        return
    await asyncio.to_thread(_stored_path(public_path).unlink, missing_ok=True)
    logger.info("image_discarded", path=public_path)
