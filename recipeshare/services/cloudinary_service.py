"""
RecipeShare API: Cloudinary Image Store
========================================

What:  ImageStore implementation backed by the Cloudinary Python SDK.
How:   cloudinary.uploader.upload / destroy and cloudinary.api.ping, with the
       credentials passed as per-call options rather than through the
       global cloudinary.config(). The SDK is blocking (urllib3), so each call
       runs in a worker thread via asyncio.to_thread.
Who:   RecipeService during create, update and delete.

Failure Translation:
    cloudinary.exceptions.Error on upload   → ImageUploadError
    cloudinary.exceptions.Error on destroy  → ImageDeletionError
    (the SDK raises Error for rejected calls, timeouts and socket errors,
    and ValueError when credentials are missing)
    destroy result "not found"              → logged, treated as done
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Type

import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader

from recipeshare.exceptions import (
    ImageDeletionError,
    ImageUploadError,
    RecipeShareError,
)
from recipeshare.services.image_store import ImageStore, ImageUpload, StoredImage

logger = logging.getLogger(__name__)


class CloudinaryImageStore(ImageStore):
    """
    Cloudinary-hosted recipe images.

    Args:
        cloud_name:  Cloudinary cloud name (CLOUDINARY_NAME)
        api_key:     API key (CLOUDINARY_API_KEY)
        api_secret:  API secret (CLOUDINARY_API_SECRET)
        folder:      Optional folder prefix for new public IDs
        timeout:     Seconds allowed for each Cloudinary request
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.folder = folder
        self.timeout = timeout
        self._options: Dict[str, Any] = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        if timeout is not None:
            self._options["timeout"] = timeout
        logger.info(
            "CloudinaryImageStore initialized for cloud=%s folder=%s",
            cloud_name,
            folder or "-",
        )

    async def _call(
        self,
        action: str,
        func: Callable[..., Dict[str, Any]],
        error_cls: Type[RecipeShareError],
        *args: Any,
        **options: Any,
    ) -> Dict[str, Any]:
        """Runs one SDK call off the event loop and maps its errors."""
        start_time = time.perf_counter()
        try:
            result = await asyncio.to_thread(func, *args, **self._options, **options)
        except (cloudinary.exceptions.Error, ValueError) as e:
            # ValueError: missing credentials, raised before any request
            logger.warning("Cloudinary %s failed: %s", action, str(e))
            raise error_cls(
                message=str(e) or f"Image service error during {action}.",
                context={"action": action, "error_type": type(e).__name__},
            )

        logger.debug(
            "Cloudinary %s completed in %.0fms",
            action,
            (time.perf_counter() - start_time) * 1000,
        )
        return result

    async def upload(self, image: ImageUpload) -> StoredImage:
        options: Dict[str, Any] = {"filename": image.filename, "resource_type": "image"}
        if self.folder:
            options["folder"] = self.folder

        result = await self._call(
            "upload", cloudinary.uploader.upload, ImageUploadError, image.content, **options
        )

        url = result.get("secure_url")
        key = result.get("public_id")
        if not url or not key:
            raise ImageUploadError(
                message="Image service response did not include the image location.",
                context={"keys": sorted(result)},
            )

        logger.info("Uploaded %s (%d bytes) as %s", image.filename, image.size, key)
        return StoredImage(url=url, key=key)

    async def destroy(self, key: str) -> None:
        result = await self._call(
            "destroy", cloudinary.uploader.destroy, ImageDeletionError, key, invalidate=True
        )

        outcome = result.get("result")
        if outcome == "ok":
            logger.info("Destroyed image %s", key)
        else:
            logger.warning("Destroy of image %s returned result=%s", key, outcome)

    async def health_check(self) -> bool:
        """
        Pings the Admin API with our credentials.

        Returns False instead of raising so /health can report a degraded state.
        """
        try:
            await asyncio.to_thread(cloudinary.api.ping, **self._options)
        except Exception as e:
            logger.warning("Cloudinary health check failed: %s", str(e))
            return False
        return True
