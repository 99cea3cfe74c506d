"""Pydantic schemas for request/response validation."""

from recipe_catalog.schemas.auth import (
    AuthTokenResponse,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    UserResponse,
    ValidateTokenResponse,
)
from recipe_catalog.schemas.base import APIRequest, APIResponse
from recipe_catalog.schemas.recipe import (
    CategoryCreateRequest,
    CategoryResponse,
    RecipeResponse,
)


__all__ = [
    "APIRequest",
    "APIResponse",
    "AuthTokenResponse",
    "CategoryCreateRequest",
    "CategoryResponse",
    "LoginRequest",
    "LogoutResponse",
    "RecipeResponse",
    "RegisterRequest",
    "UserResponse",
    "ValidateTokenResponse",
]
