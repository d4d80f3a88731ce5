"""
RecipeShare API: Recipe Lifecycle Service
==========================================

What:  Orders record-store and image-store calls for show, create, update and
       delete so a recipe only points at images that were uploaded for it.
How:   Each operation is one awaited sequence of fallible steps; the first
       failing step raises and nothing after it runs.
Who:   Recipe route handlers.

Orchestration:
    create:  upload image ─▶ insert record (with url/key + author)
    update:  load ─▶ [destroy old image ─▶ upload new image] ─▶ merge ─▶ save
    delete:  load ─▶ destroy image ─▶ remove record

Known gaps (kept as is):
    - create: if the insert fails, the uploaded image stays on the image host.
      With compensate_orphaned_uploads=True the upload is destroyed again
      (best effort) before the error propagates.
    - update: if destroy succeeds and the upload fails, the stored record
      still references the destroyed key. Nothing is saved in that case.
"""

import logging
from typing import Optional
from uuid import UUID

from recipeshare.exceptions import (
    ImageDeletionError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
)
from recipeshare.models.recipe import Recipe
from recipeshare.schemas.recipe import CurrentUser, RecipeCreate, RecipeUpdate
from recipeshare.services.image_store import ImageStore, ImageUpload
from recipeshare.services.recipe_store import RecipeStore

logger = logging.getLogger(__name__)


class RecipeService:
    """
    Create/read/update/delete for recipes and their hosted images.

    Args:
        store:        Record store for the current request
        image_store:  Image host client (shared across requests)
        compensate_orphaned_uploads: destroy the new upload when create fails
            to persist the record
    """

    def __init__(
        self,
        store: RecipeStore,
        image_store: ImageStore,
        compensate_orphaned_uploads: bool = False,
    ):
        self.store = store
        self.image_store = image_store
        self.compensate_orphaned_uploads = compensate_orphaned_uploads

    async def _load(self, recipe_id: UUID, with_comments: bool = False) -> Recipe:
        recipe = await self.store.find_by_id(recipe_id, with_comments=with_comments)
        if recipe is None:
            raise NotFoundError(resource="Recipe", resource_id=str(recipe_id))
        return recipe

    @staticmethod
    def _ensure_author(recipe: Recipe, user: CurrentUser) -> None:
        if recipe.author_id != user.id:
            logger.warning(
                "User %s attempted to modify recipe %s owned by %s",
                user.id,
                recipe.id,
                recipe.author_id,
            )
            raise PermissionDeniedError(context={"recipe_id": str(recipe.id)})

    async def get_recipe(self, recipe_id: UUID) -> Recipe:
        """Loads one recipe with its comments, or raises NotFoundError."""
        return await self._load(recipe_id, with_comments=True)

    async def create_recipe(
        self,
        fields: RecipeCreate,
        image: ImageUpload,
        author: CurrentUser,
    ) -> Recipe:
        """
        Absent → Pending-Image → Persisted.

        Raises:
            ImageUploadError: Upload rejected; no record is created.
            PersistenceError: Insert failed; the upload is left in place
                unless compensation is enabled.
        """
        stored = await self.image_store.upload(image)
        logger.info("Recipe image uploaded for new recipe: %s", stored.key)

        record = {
            **fields.model_dump(),
            "image": stored.url,
            "image_id": stored.key,
            "author_id": author.id,
            "author_username": author.username,
        }

        try:
            recipe = await self.store.create(record)
        except PersistenceError:
            if self.compensate_orphaned_uploads:
                await self._discard_upload(stored.key)
            else:
                logger.warning("Recipe insert failed; image %s left on image store", stored.key)
            raise

        return recipe

    async def _discard_upload(self, key: str) -> None:
        try:
            await self.image_store.destroy(key)
            logger.info("Discarded orphaned upload %s", key)
        except ImageDeletionError as e:
            logger.error("Could not discard orphaned upload %s: %s", key, e.message)

    async def update_recipe(
        self,
        recipe_id: UUID,
        changes: RecipeUpdate,
        image: Optional[ImageUpload],
        user: CurrentUser,
    ) -> Recipe:
        """
        Persisted → (Pending-Image →) Persisted.

        With a new image the old one is destroyed first, then the new one is
        uploaded. Scalar fields are applied only after the image step succeeds.

        Raises:
            NotFoundError, PermissionDeniedError,
            ImageDeletionError (old image not destroyed, nothing changed),
            ImageUploadError (old image already destroyed, nothing saved),
            PersistenceError
        """
        recipe = await self._load(recipe_id)
        self._ensure_author(recipe, user)

        if image is not None:
            if recipe.image_id:
                await self.image_store.destroy(recipe.image_id)
            else:
                logger.warning("Recipe %s has no stored image to replace", recipe.id)
            stored = await self.image_store.upload(image)
            changes = changes.model_copy(update={"image": stored.url, "image_id": stored.key})

        recipe.name = changes.name
        recipe.description = changes.description
        recipe.price = changes.price
        if changes.image_id is not None:
            recipe.image = changes.image
            recipe.image_id = changes.image_id

        await self.store.save(recipe)
        logger.info("Recipe %s updated (new image: %s)", recipe.id, image is not None)
        return recipe

    async def delete_recipe(self, recipe_id: UUID, user: CurrentUser) -> None:
        """
        Persisted → Pending-Delete → Absent.

        Raises:
            NotFoundError, PermissionDeniedError,
            ImageDeletionError (record left untouched),
            PersistenceError
        """
        recipe = await self._load(recipe_id)
        self._ensure_author(recipe, user)

        if recipe.image_id:
            await self.image_store.destroy(recipe.image_id)

        await self.store.remove(recipe)
        logger.info("Recipe %s deleted", recipe_id)
