"""
File Upload Utility - validate uploaded files before storing them.

Allowed extensions and the size limit come from settings
(`allowed_upload_extensions`, `max_upload_size_mb`).
"""

from typing import Tuple

from fastapi import UploadFile

from placement_portal.core.config import get_settings
from placement_portal.core.exceptions import ValidationFailed

RESUME_EXTENSIONS = {".pdf", ".doc", ".docx"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_upload(file: UploadFile, allowed: set = None) -> Tuple[bytes, str]:
    """
    Read and validate an uploaded file.

    Args:
        file: FastAPI UploadFile
        allowed: Extensions accepted for this upload; defaults to every
            configured extension

    Returns:
        Tuple of (content, filename)

    Raises:
        ValidationFailed on a missing name, disallowed type, empty or oversized file
    """
    settings = get_settings()

    if not file.filename:
        raise ValidationFailed("No filename provided")

    permitted = set(settings.upload_extensions)
    if allowed is not None:
        permitted &= set(allowed)

    ext = get_file_extension(file.filename)
    if ext not in permitted:
        raise ValidationFailed(
            f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(permitted))}"
        )

    content = await file.read()
    if not content:
        raise ValidationFailed("Uploaded file is empty")

    if len(content) > settings.max_upload_size_mb * 1024 * 1024:
        raise ValidationFailed(f"File too large. Maximum size: {settings.max_upload_size_mb}MB")

    return content, file.filename
