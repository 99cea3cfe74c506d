"""Recipe and category schemas."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import Field

from recipe_catalog.schemas.base import APIRequest, APIResponse


class CategoryCreateRequest(APIRequest):
    """Category creation payload."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class CategoryResponse(APIResponse):
    """Category as returned by the API."""

    id: int
    name: str
    description: str | None = None


class RecipeResponse(APIResponse):
    """Recipe with its category embedded."""

    id: int
    title: str
    image: str | None = Field(default=None, description="Stored image path")
    description: str | None = None
    ingredients: str | None = None
    instructions: str | None = None
    user_id: int
    category_id: int
    price: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category: CategoryResponse | None = None
