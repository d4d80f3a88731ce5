"""
RecipeShare API: Recipe Route Handlers
=======================================

What:  GET/POST /recipes and GET/PUT/DELETE /recipes/{id}.
How:   Reads query/form/file input, validates it, delegates to ListingService
       or RecipeService, returns JSON. Errors propagate to the global
       handlers in main.py.

Request Flow (POST /recipes):
    1. Form fields → RecipeCreate (400 on invalid input)
    2. Image file → FileService intake (400 on non-image name / too large)
    3. RecipeService.create_recipe: upload image → insert record
    4. 201 Created, Location: /recipes/{id}
"""

import logging
from typing import Optional, Type, TypeVar
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from recipeshare.dependencies import (
    get_current_user,
    get_listing_service,
    get_recipe_service,
)
from recipeshare.exceptions import ValidationError
from recipeshare.schemas.recipe import (
    CurrentUser,
    ErrorResponse,
    MessageResponse,
    RecipeCreate,
    RecipeDetailResponse,
    RecipePageResponse,
    RecipeResponse,
    RecipeUpdate,
    to_recipe_detail,
    to_recipe_response,
)
from recipeshare.services.file_service import file_service
from recipeshare.services.listing_service import ListingService, parse_page
from recipeshare.services.recipe_service import RecipeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["Recipes"])

M = TypeVar("M", bound=BaseModel)


def parse_form(model: Type[M], **values) -> M:
    """Validates form values into `model`, raising our 400 ValidationError."""
    try:
        return model(**values)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(
            message=f"Invalid value for '{field}': {first.get('msg')}",
            field=field or None,
            context={"errors": len(e.errors())},
        )


def _has_file(upload: Optional[UploadFile]) -> bool:
    # Browsers submit an empty, nameless part when no file was chosen
    return upload is not None and bool(upload.filename)


@router.get(
    "",
    response_model=RecipePageResponse,
    responses={500: {"description": "Count query failed", "model": ErrorResponse}},
    summary="List recipes, optionally searching by name",
)
async def list_recipes(
    search: Optional[str] = Query(default=None, description="Literal text to find in recipe names"),
    page: Optional[str] = Query(default=None, description="Page number (8 recipes per page)"),
    listing: ListingService = Depends(get_listing_service),
) -> RecipePageResponse:
    return await listing.list_recipes(search=search, page=parse_page(page))


@router.post(
    "",
    status_code=201,
    response_model=RecipeResponse,
    responses={
        400: {"description": "Invalid field or non-image file", "model": ErrorResponse},
        401: {"description": "Not logged in", "model": ErrorResponse},
        502: {"description": "Image upload failed", "model": ErrorResponse},
    },
    summary="Create a recipe with an image",
)
async def create_recipe(
    response: Response,
    name: str = Form(...),
    description: str = Form(default=""),
    price: str = Form(...),
    image: UploadFile = File(..., description="Recipe photo (.jpg, .jpeg, .png, .gif)"),
    user: CurrentUser = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    fields = parse_form(RecipeCreate, name=name, description=description, price=price)
    upload = await file_service.read_image(image)

    recipe = await recipes.create_recipe(fields, upload, author=user)

    response.headers["Location"] = f"/recipes/{recipe.id}"
    return to_recipe_response(recipe)


@router.get(
    "/{recipe_id}",
    response_model=RecipeDetailResponse,
    responses={404: {"description": "Recipe not found", "model": ErrorResponse}},
    summary="Show one recipe with its comments",
)
async def show_recipe(
    recipe_id: UUID,
    recipes: RecipeService = Depends(get_recipe_service),
) -> RecipeDetailResponse:
    recipe = await recipes.get_recipe(recipe_id)
    return to_recipe_detail(recipe)


@router.put(
    "/{recipe_id}",
    response_model=RecipeResponse,
    responses={
        400: {"description": "Invalid field or non-image file", "model": ErrorResponse},
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Recipe not found", "model": ErrorResponse},
        502: {"description": "Image replacement failed", "model": ErrorResponse},
    },
    summary="Update a recipe, optionally replacing its image",
)
async def update_recipe(
    recipe_id: UUID,
    name: str = Form(...),
    description: str = Form(default=""),
    price: str = Form(...),
    image: Optional[UploadFile] = File(default=None),
    user: CurrentUser = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    changes = parse_form(RecipeUpdate, name=name, description=description, price=price)
    upload = await file_service.read_image(image) if _has_file(image) else None

    recipe = await recipes.update_recipe(recipe_id, changes, upload, user=user)
    return to_recipe_response(recipe)


@router.delete(
    "/{recipe_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Recipe not found", "model": ErrorResponse},
        502: {"description": "Image could not be destroyed", "model": ErrorResponse},
    },
    summary="Delete a recipe and its image",
)
async def delete_recipe(
    recipe_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    recipes: RecipeService = Depends(get_recipe_service),
) -> MessageResponse:
    await recipes.delete_recipe(recipe_id, user=user)
    return MessageResponse(message="Recipe deleted successfully!")
