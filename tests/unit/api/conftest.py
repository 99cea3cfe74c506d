"""Route test fixtures.

The application is built with ``create_app()`` but its lifespan is not run;
app state and repository dependencies are replaced with mocks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from recipe_catalog.api.dependencies import (
    get_category_repository,
    get_recipe_repository,
    get_user_repository,
)
from recipe_catalog.auth.models import AuthOutcome
from recipe_catalog.core.rate_limit import limiter
from recipe_catalog.database.repositories import UserRecord
from recipe_catalog.factory import create_app
from recipe_catalog.storage import ImageStore


if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Generator
    from pathlib import Path

    from fastapi import FastAPI

@pytest.fixture(autouse=True)
def reset_rate_limits() -> Generator[None]:
    """Start every test with empty rate limit counters."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def current_user() -> UserRecord:
    """User holding ``valid-token``."""
    return UserRecord(
        id=1,
        name="Ada",
        email="ada@example.com",
        password_hash="hash",
        api_token="valid-token",
        refresh_token="refresh-token",
    )


@pytest.fixture
def auth_client() -> MagicMock:
    """Mock external auth client accepting ``valid-token``."""
    client = MagicMock()
    client.register = AsyncMock()
    client.login = AsyncMock()
    client.refresh_token = AsyncMock()
    client.validate_token = AsyncMock(
        return_value=AuthOutcome(success=True, valid=True, user_data={"id": 1})
    )
    client.logout = AsyncMock(
        return_value=AuthOutcome(success=True, message="Logged out successfully")
    )
    return client


@pytest.fixture
def users(current_user: UserRecord) -> MagicMock:
    """Mock user repository."""
    repo = MagicMock()
    repo.get_by_api_token = AsyncMock(return_value=current_user)
    repo.get_by_email = AsyncMock(return_value=None)
    repo.email_exists = AsyncMock(return_value=False)
    repo.create = AsyncMock(return_value=current_user)
    repo.update_tokens = AsyncMock(return_value=current_user)
    return repo


@pytest.fixture
def categories() -> MagicMock:
    """Mock category repository."""
    repo = MagicMock()
    repo.list_all = AsyncMock(return_value=[])
    repo.exists = AsyncMock(return_value=True)
    repo.create = AsyncMock()
    return repo


@pytest.fixture
def recipes() -> MagicMock:
    """Mock recipe repository."""
    repo = MagicMock()
    repo.list_with_categories = AsyncMock(return_value=[])
    repo.get = AsyncMock(return_value=None)
    repo.create = AsyncMock()
    repo.update = AsyncMock()
    repo.delete = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def image_store(tmp_path: Path) -> ImageStore:
    """Image store in a temporary directory."""
    return ImageStore(tmp_path, max_size_kb=2)


@pytest.fixture
def app(
    auth_client: MagicMock,
    users: MagicMock,
    categories: MagicMock,
    recipes: MagicMock,
    image_store: ImageStore,
) -> FastAPI:
    """Application wired to the mocks."""
    app = create_app()
    app.state.external_auth_client = auth_client
    app.state.image_store = image_store
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_category_repository] = lambda: categories
    app.dependency_overrides[get_recipe_repository] = lambda: recipes
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client calling the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
