"""Recipe endpoints.

Recipes are created and updated from multipart forms so an image can be
uploaded alongside the fields. All routes require an authenticated user.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status
from starlette.responses import Response

from recipe_catalog.api.dependencies import (
    get_category_repository,
    get_image_store,
    get_recipe_repository,
)
from recipe_catalog.auth.dependencies import CurrentUser
from recipe_catalog.core.exceptions import NotFoundException, ValidationException
from recipe_catalog.database.repositories import (  # noqa: TC001
    MAX_PRICE,
    CategoryRepository,
    RecipeRepository,
    RecipeWrite,
)
from recipe_catalog.mappers import build_recipe_response
from recipe_catalog.observability.logging import get_logger
from recipe_catalog.schemas import RecipeResponse
from recipe_catalog.storage import ImageStore, InvalidImageError  # noqa: TC001


logger = get_logger(__name__)

router = APIRouter(prefix="/recipes", tags=["Recipes"])

# Largest BIGSERIAL value
_MAX_ID = 2**63 - 1

RecipeId = Annotated[int, Path(..., ge=1, le=_MAX_ID, description="Recipe ID")]

_WRITE_ERRORS: dict[int | str, dict[str, str]] = {
    401: {"description": "Authentication required"},
    422: {"description": "Invalid form data, unknown category or bad image"},
}


@dataclass(frozen=True)
class RecipeForm:
    """Multipart fields shared by create and update."""

    data: RecipeWrite
    image: UploadFile | None


async def read_recipe_form(
    title: Annotated[str, Form(min_length=1, max_length=255)],
    category_id: Annotated[int, Form(ge=1, le=_MAX_ID)],
    description: Annotated[str | None, Form()] = None,
    ingredients: Annotated[str | None, Form()] = None,
    instructions: Annotated[str | None, Form()] = None,
    price: Annotated[
        Decimal | None, Form(ge=0, le=MAX_PRICE, decimal_places=2)
    ] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> RecipeForm:
    """Collect the recipe form; an empty file part counts as no upload."""
    return RecipeForm(
        data=RecipeWrite(
            title=title,
            description=description,
            ingredients=ingredients,
            instructions=instructions,
            category_id=category_id,
            price=price,
        ),
        image=image if image is not None and image.filename else None,
    )


async def _validated_image_path(
    form: RecipeForm,
    categories: CategoryRepository,
    images: ImageStore,
) -> str | None:
    """Check the category, then store the upload if there is one."""
    if not await categories.exists(form.data.category_id):
        raise ValidationException("category_id", "The selected category is invalid")

    if form.image is None:
        return None
    try:
        return await images.save(form.image)
    except InvalidImageError as e:
        raise ValidationException("image", str(e)) from e


@router.get(
    "",
    response_model=list[RecipeResponse],
    summary="List recipes",
    responses={401: {"description": "Authentication required"}},
)
async def list_recipes(
    user: CurrentUser,  # noqa: ARG001
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> list[RecipeResponse]:
    """All recipes with their category."""
    return [build_recipe_response(r) for r in await recipes.list_with_categories()]


@router.post(
    "",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a recipe",
    responses=_WRITE_ERRORS,
)
async def create_recipe(
    user: CurrentUser,
    form: Annotated[RecipeForm, Depends(read_recipe_form)],
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
    images: Annotated[ImageStore, Depends(get_image_store)],
) -> RecipeResponse:
    """Create a recipe owned by the caller."""
    image_path = await _validated_image_path(form, categories, images)
    try:
        recipe = await recipes.create(form.data, user_id=user.id, image=image_path)
    except Exception:
        await images.delete(image_path)
        raise

    logger.info("Recipe created", recipe_id=recipe.id, user_id=user.id)
    return build_recipe_response(recipe)


@router.get(
    "/{recipe_id}",
    response_model=RecipeResponse,
    summary="Get a recipe",
    responses={
        401: {"description": "Authentication required"},
        404: {"description": "Recipe not found"},
    },
)
async def get_recipe(
    recipe_id: RecipeId,
    user: CurrentUser,  # noqa: ARG001
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> RecipeResponse:
    """Fetch one recipe."""
    recipe = await recipes.get(recipe_id)
    if recipe is None:
        raise NotFoundException("Recipe", recipe_id)
    return build_recipe_response(recipe)


@router.put(
    "/{recipe_id}",
    response_model=RecipeResponse,
    summary="Update a recipe",
    responses={**_WRITE_ERRORS, 404: {"description": "Recipe not found"}},
)
async def update_recipe(
    recipe_id: RecipeId,
    user: CurrentUser,
    form: Annotated[RecipeForm, Depends(read_recipe_form)],
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
    images: Annotated[ImageStore, Depends(get_image_store)],
) -> RecipeResponse:
    """Replace a recipe's fields; the image changes only when one is uploaded."""
    existing = await recipes.get(recipe_id)
    if existing is None:
        raise NotFoundException("Recipe", recipe_id)

    image_path = await _validated_image_path(form, categories, images)
    try:
        updated = await recipes.update(
            recipe_id, form.data, user_id=user.id, image=image_path
        )
    except Exception:
        await images.delete(image_path)
        raise
    if updated is None:
        # Deleted concurrently; drop the orphaned upload
        await images.delete(image_path)
        raise NotFoundException("Recipe", recipe_id)

    if image_path is not None and existing.image and existing.image != image_path:
        await images.delete(existing.image)

    logger.info("Recipe updated", recipe_id=recipe_id, user_id=user.id)
    return build_recipe_response(updated)


@router.delete(
    "/{recipe_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a recipe",
    responses={
        401: {"description": "Authentication required"},
        404: {"description": "Recipe not found"},
    },
)
async def delete_recipe(
    recipe_id: RecipeId,
    user: CurrentUser,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    images: Annotated[ImageStore, Depends(get_image_store)],
) -> Response:
    """Delete a recipe and its stored image."""
    deleted = await recipes.delete(recipe_id)
    if deleted is None:
        raise NotFoundException("Recipe", recipe_id)

    await images.delete(deleted.image)
    logger.info("Recipe deleted", recipe_id=recipe_id, user_id=user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
