"""
RecipeShare API: Abstract Image Store Interface
================================================

What:  Contract for the third-party service that hosts recipe images.
How:   Concrete stores inherit from ImageStore and implement upload() and
       destroy(). CloudinaryImageStore is the production implementation.
Who:   RecipeService receives an ImageStore at construction time.

Contract:
    - upload() returns the public URL and the key needed to destroy it later
    - every provider failure (rejection, transport error, timeout) is wrapped
      in ImageUploadError / ImageDeletionError
    - no retries: one call per operation
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class ImageUpload(BaseModel):
    """An image file accepted by the upload intake."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class StoredImage(BaseModel):
    """Result of a successful upload: public URL plus image-store key."""

    url: str
    key: str


class ImageStore(ABC):
    """Abstract interface for hosted image storage."""

    @abstractmethod
    async def upload(self, image: ImageUpload) -> StoredImage:
        """
        Upload the image bytes and return where they are served from.

        Raises:
            ImageUploadError: The store rejected the file, or the call failed
                or timed out.
        """
        ...

    @abstractmethod
    async def destroy(self, key: str) -> None:
        """
        Remove a previously uploaded image.

        Raises:
            ImageDeletionError: The store reported an error, or the call
                failed or timed out.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability/credentials check used by GET /health."""
        ...
