"""FastAPI dependencies for service access.

Clients are created during application startup and stored in
``app.state``; repositories are cheap and built per request on top of the
global connection pool.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from recipe_catalog.auth.client import ExternalAuthClient
from recipe_catalog.core.exceptions import ServiceUnavailableException
from recipe_catalog.database.repositories import (
    CategoryRepository,
    RecipeRepository,
    UserRepository,
)
from recipe_catalog.services.accounts import AccountService
from recipe_catalog.storage import ImageStore


async def get_external_auth_client(request: Request) -> ExternalAuthClient:
    """Get the external auth client from app state.

    Raises:
        ServiceUnavailableException: 503 if the client is not initialized.
    """
    client: ExternalAuthClient | None = getattr(
        request.app.state, "external_auth_client", None
    )
    if client is None:
        raise ServiceUnavailableException("Authentication service not available")
    return client


async def get_image_store(request: Request) -> ImageStore:
    """Get the image store from app state.

    Raises:
        ServiceUnavailableException: 503 if the store is not initialized.
    """
    store: ImageStore | None = getattr(request.app.state, "image_store", None)
    if store is None:
        raise ServiceUnavailableException("Image storage not available")
    return store


async def get_user_repository() -> UserRepository:
    """User repository on the global pool."""
    return UserRepository()


async def get_category_repository() -> CategoryRepository:
    """Category repository on the global pool."""
    return CategoryRepository()


async def get_recipe_repository() -> RecipeRepository:
    """Recipe repository on the global pool."""
    return RecipeRepository()


async def get_account_service(
    auth_client: Annotated[ExternalAuthClient, Depends(get_external_auth_client)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> AccountService:
    """Account service wired to the auth client and user repository."""
    return AccountService(auth_client, users)
