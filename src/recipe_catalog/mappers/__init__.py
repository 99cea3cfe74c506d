"""Mappers from database records to API response schemas."""

from recipe_catalog.mappers.recipe import (
    build_auth_token_response,
    build_category_response,
    build_recipe_response,
    build_user_response,
)


__all__ = [
    "build_auth_token_response",
    "build_category_response",
    "build_recipe_response",
    "build_user_response",
]
