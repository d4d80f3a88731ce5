"""
RecipeShare API: Upload Intake
===============================

What:  Accepts the single image file attached to a create/update request.
How:   Checks the original filename against the allowed image extensions,
       reads the bytes, enforces the size limit and hands back an
       ImageUpload for the lifecycle service.
Who:   Recipe route handlers, before any service call.

Validation order:
    1. Filename extension  (.jpg, .jpeg, .png, .gif, case-insensitive)
    2. Declared size       (UploadFile.size, when the client sent one)
    3. Actual size         (bytes read)

Any failure raises ValidationError, so a rejected file never reaches the
image store or the record store.
"""

import logging
import re
from typing import Optional

from fastapi import UploadFile

from recipeshare.config import settings
from recipeshare.exceptions import ValidationError
from recipeshare.services.image_store import ImageUpload

logger = logging.getLogger(__name__)

# Matched against the end of the original filename
ALLOWED_IMAGE_NAME = re.compile(r"\.(jpg|jpeg|png|gif)\Z", re.IGNORECASE)

ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")


class FileService:
    """Validates and reads uploaded recipe images."""

    def __init__(self, max_file_size: Optional[int] = None):
        self.max_file_size = max_file_size or settings.max_file_size

    def validate_filename(self, filename: Optional[str]) -> None:
        """
        Raises ValidationError unless `filename` ends in an image extension.
        """
        if not filename or not ALLOWED_IMAGE_NAME.search(filename):
            raise ValidationError(
                message="Only image files are allowed!",
                field="image",
                context={"filename": filename, "allowed": list(ALLOWED_EXTENSIONS)},
            )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Rejects files above the configured maximum.

        content_length is checked first (client-declared), then the real size.
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    async def read_image(self, upload: UploadFile) -> ImageUpload:
        """
        Complete intake pipeline for one uploaded file.

        The filename is checked before the body is read. The UploadFile is
        always closed.
        """
        try:
            self.validate_filename(upload.filename)
            self.validate_size(upload.size, 0)

            content = await upload.read()
            self.validate_size(None, len(content))

            logger.info(
                "Accepted upload: filename=%s, size=%d bytes",
                upload.filename,
                len(content),
            )
            return ImageUpload(
                filename=upload.filename,
                content=content,
                content_type=upload.content_type,
            )
        finally:
            await upload.close()


file_service = FileService()
