"""
File Upload Utility - Store avatar images.

Supported formats:
- JPEG (.jpg, .jpeg)
- PNG (.png)
- GIF (.gif)

Files are written to settings.upload_dir and served from /uploads.
"""

import os
import uuid
from fastapi import UploadFile, HTTPException

from guidancehub.core.config import get_settings

settings = get_settings()

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}
UPLOAD_URL_PREFIX = "/uploads"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def max_avatar_bytes() -> int:
    return settings.max_avatar_size_mb * 1024 * 1024


async def save_avatar(file: UploadFile, user_id: str) -> str:
    """
    Validate and store an uploaded avatar.

    Args:
        file: FastAPI UploadFile
        user_id: Owner, used as the file name prefix

    Returns:
        Public URL path of the stored file (/uploads/<name>)

    Raises:
        HTTPException on validation errors
    """
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: JPG, JPEG, PNG, GIF"
        )

    content = await file.read()

    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    if len(content) > max_avatar_bytes():
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_avatar_size_mb}MB"
        )

    os.makedirs(settings.upload_dir, exist_ok=True)
    filename = f"avatar-{user_id}-{uuid.uuid4().hex}{ext}"
    with open(os.path.join(settings.upload_dir, filename), "wb") as out:
        out.write(content)

    return f"{UPLOAD_URL_PREFIX}/{filename}"


def get_supported_formats() -> dict:
    """Get info about supported avatar formats."""
    return {
        "supported_formats": sorted(ALLOWED_EXTENSIONS),
        "max_size_mb": settings.max_avatar_size_mb
    }
