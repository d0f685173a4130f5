"""
Upload Service - stores product and profile images on local disk
"""
from fastapi import UploadFile
from datetime import datetime
from typing import Optional
import logging
import os
import random

from rewardstore.core import settings
from rewardstore.core.exceptions import ValidationFailedError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
URL_PREFIX = "/uploads"

class UploadService:

    @staticmethod
    def save_image(file: UploadFile, subdir: str, field_name: str = "image") -> str:
        """Save an uploaded image and return its public URL path"""
        if file.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationFailedError(
                "Invalid file type. Only JPG, PNG, GIF and WebP images are allowed",
                errors=[{"field": field_name, "message": f"unsupported content type {file.content_type}"}]
            )

        content = file.file.read(settings.MAX_UPLOAD_SIZE + 1)
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise ValidationFailedError(
                "File too large",
                errors=[{"field": field_name, "message": f"must be at most {settings.MAX_UPLOAD_SIZE} bytes"}]
            )

        upload_dir = os.path.join(settings.UPLOAD_PATH, subdir)
        os.makedirs(upload_dir, exist_ok=True)

        # Format: {field}-{epoch millis}-{random}{ext}
        extension = os.path.splitext(file.filename or "")[1].lower()
        suffix = f"{int(datetime.now().timestamp() * 1000)}-{random.randint(0, 10**9)}"
        filename = f"{field_name}-{suffix}{extension}"

        with open(os.path.join(upload_dir, filename), "wb") as out:
            out.write(content)

        logger.info(f"Stored upload {subdir}/{filename} ({len(content)} bytes)")
        return f"{URL_PREFIX}/{subdir}/{filename}"

    @staticmethod
    def delete_image(url: Optional[str]) -> bool:
        """Remove a previously stored image; missing files are ignored"""
        if not url or not url.startswith(f"{URL_PREFIX}/"):
            return False
        relative = url[len(URL_PREFIX) + 1:]
        path = os.path.normpath(os.path.join(settings.UPLOAD_PATH, relative))
        if not path.startswith(os.path.normpath(settings.UPLOAD_PATH)):
            return False
        if os.path.exists(path):
            os.remove(path)
            return True
        return False
