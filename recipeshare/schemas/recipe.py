"""
RecipeShare API: Pydantic Request/Response Schemas
===================================================

What:  Pydantic models defining the API contract of the recipe endpoints.
How:   Routes validate form input into RecipeCreate / RecipeUpdate and return
       the response models below; FastAPI builds the OpenAPI docs from them.

Schemas are separate from the SQLAlchemy models: responses never expose more
than these fields, and comments are only included on the detail view (they
are loaded eagerly only there).
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class RecipeFields(BaseModel):
    """Scalar fields a caller may set on a recipe."""

    name: str = Field(min_length=1, max_length=200, description="Recipe name")
    description: str = Field(default="", max_length=10_000)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Rejects names that are only whitespace."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


class RecipeCreate(RecipeFields):
    """Fields submitted with a new recipe (the image arrives separately)."""
    pass


class RecipeUpdate(RecipeFields):
    """
    Explicit update set: exactly name, description, price, image, image_id.

    image / image_id stay None unless a replacement image was uploaded, in
    which case the lifecycle service fills both from the image store result.
    """

    image: Optional[str] = Field(default=None)
    image_id: Optional[str] = Field(default=None)


class CurrentUser(BaseModel):
    """Caller identity used as the author on create and for ownership checks."""

    id: str = Field(min_length=1, max_length=64)
    username: str = Field(min_length=1, max_length=100)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorResponse(BaseModel):
    id: str
    username: str


class CommentResponse(BaseModel):
    """A comment shown under a recipe on its detail view."""

    id: uuid.UUID
    text: str
    author: AuthorResponse
    created_at: datetime


class RecipeResponse(BaseModel):
    """
    What:  Representation of one recipe.
    Who:   Returned by list items, create and update.
    """

    id: uuid.UUID = Field(description="Unique recipe identifier (UUID)")
    name: str
    description: str
    price: Decimal
    image: Optional[str] = Field(default=None, description="Public image URL")
    image_id: Optional[str] = Field(default=None, description="Image store key")
    author: AuthorResponse
    created_at: datetime


class RecipeDetailResponse(RecipeResponse):
    """Recipe with its comments populated. Returned by GET /recipes/{id}."""

    comments: List[CommentResponse] = Field(default_factory=list)


class RecipePageResponse(BaseModel):
    """
    What:  One page of the recipe index.
    Who:   Returned by GET /recipes.

    Fields:
        recipes:     At most 8 recipes, in store order
        current:     Page number that was served
        pages:       ceil(total_count / 8)
        total_count: Number of recipes matching the filter
        no_match:    Message when a search returned an empty page, else null
        search:      The search term as received, null when none was given
        warnings:    Non-fatal problems hit while building the page
    """

    recipes: List[RecipeResponse]
    current: int
    pages: int
    total_count: int
    no_match: Optional[str] = None
    search: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Only image files are allowed!",
            "details": {"field": "image", "filename": "photo.exe"},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    image_store: str = Field(description="Image store status: available, unavailable, unconfigured")
    uptime_seconds: float


# ══════════════════════════════════════════════════════════════════════════
# Builders
# ══════════════════════════════════════════════════════════════════════════


def to_recipe_response(recipe) -> RecipeResponse:
    """Builds a RecipeResponse without touching the (unloaded) comments."""
    return RecipeResponse(
        id=recipe.id,
        name=recipe.name,
        description=recipe.description,
        price=recipe.price,
        image=recipe.image,
        image_id=recipe.image_id,
        author=AuthorResponse(id=recipe.author_id, username=recipe.author_username),
        created_at=recipe.created_at,
    )


def to_recipe_detail(recipe) -> RecipeDetailResponse:
    """Builds the detail view; comments must have been loaded eagerly."""
    base = to_recipe_response(recipe)
    return RecipeDetailResponse(
        **base.model_dump(),
        comments=[
            CommentResponse(
                id=comment.id,
                text=comment.text,
                author=AuthorResponse(
                    id=comment.author_id, username=comment.author_username
                ),
                created_at=comment.created_at,
            )
            for comment in recipe.comments
        ],
    )
