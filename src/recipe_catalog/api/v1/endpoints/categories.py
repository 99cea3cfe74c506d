"""Category endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from recipe_catalog.api.dependencies import get_category_repository
from recipe_catalog.auth.dependencies import CurrentUser
from recipe_catalog.database.repositories import CategoryRepository  # noqa: TC001
from recipe_catalog.mappers import build_category_response
from recipe_catalog.observability.logging import get_logger
from recipe_catalog.schemas import CategoryCreateRequest, CategoryResponse


logger = get_logger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
)
async def list_categories(
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> list[CategoryResponse]:
    """All categories ordered by name."""
    return [build_category_response(c) for c in await categories.list_all()]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
    responses={401: {"description": "Authentication required"}},
)
async def create_category(
    payload: CategoryCreateRequest,
    user: CurrentUser,
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> CategoryResponse:
    """Create a category."""
    category = await categories.create(payload.name, payload.description)
    logger.info("Category created", category_id=category.id, user_id=user.id)
    return build_category_response(category)
