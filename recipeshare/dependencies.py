"""
RecipeShare API: Request Dependencies
======================================

What:  FastAPI dependency providers that assemble the services for a request.
How:   RecipeStore wraps the per-request session; the ImageStore is the one
       built in the app lifespan and kept on app.state. Services receive
       both explicitly.

Caller identity:
    Login/session handling lives in front of this service. It forwards the
    authenticated user as X-User-Id / X-Username headers.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from recipeshare.config import settings
from recipeshare.database import get_db_session
from recipeshare.exceptions import AuthenticationError, RecipeShareError
from recipeshare.schemas.recipe import CurrentUser
from recipeshare.services.image_store import ImageStore
from recipeshare.services.listing_service import ListingService
from recipeshare.services.recipe_service import RecipeService
from recipeshare.services.recipe_store import RecipeStore


def get_image_store(request: Request) -> ImageStore:
    image_store = getattr(request.app.state, "image_store", None)
    if image_store is None:
        raise RecipeShareError(message="Image service is not configured.")
    return image_store


def get_recipe_store(db: AsyncSession = Depends(get_db_session)) -> RecipeStore:
    return RecipeStore(db)


def get_listing_service(store: RecipeStore = Depends(get_recipe_store)) -> ListingService:
    return ListingService(store)


def get_recipe_service(
    store: RecipeStore = Depends(get_recipe_store),
    image_store: ImageStore = Depends(get_image_store),
) -> RecipeService:
    return RecipeService(
        store=store,
        image_store=image_store,
        compensate_orphaned_uploads=settings.compensate_orphaned_uploads,
    )


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_username: Optional[str] = Header(default=None),
) -> CurrentUser:
    """Returns the calling user, or raises AuthenticationError (401)."""
    if not x_user_id or not x_username:
        raise AuthenticationError()
    try:
        return CurrentUser(id=x_user_id, username=x_username)
    except PydanticValidationError:
        raise AuthenticationError(message="Invalid user identity")
