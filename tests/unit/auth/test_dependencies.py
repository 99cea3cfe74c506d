"""Unit tests for get_current_user."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from recipe_catalog.auth.dependencies import get_bearer_token, get_current_user
from recipe_catalog.auth.models import AuthOutcome
from recipe_catalog.core.exceptions import (
    ServiceUnavailableException,
    UnauthorizedException,
)
from recipe_catalog.database.repositories import UserRecord


pytestmark = pytest.mark.unit


@pytest.fixture
def user() -> UserRecord:
    return UserRecord(id=4, name="Ada", email="ada@example.com", password_hash="h")


def _client(outcome: AuthOutcome) -> MagicMock:
    client = MagicMock()
    client.validate_token = AsyncMock(return_value=outcome)
    return client


def _users(user: UserRecord | None) -> MagicMock:
    users = MagicMock()
    users.get_by_api_token = AsyncMock(return_value=user)
    return users


async def test_missing_credentials() -> None:
    with pytest.raises(UnauthorizedException):
        await get_bearer_token(None)


async def test_valid_token_returns_user(user: UserRecord) -> None:
    result = await get_current_user(
        "tok", _client(AuthOutcome(success=True, valid=True)), _users(user)
    )
    assert result is user


async def test_rejected_token() -> None:
    with pytest.raises(UnauthorizedException):
        await get_current_user(
            "tok", _client(AuthOutcome(success=True, valid=False)), _users(None)
        )


async def test_unreachable_auth_service(user: UserRecord) -> None:
    outcome = AuthOutcome(
        success=False, message="Failed to validate token", error_code="VALIDATION_ERROR"
    )
    with pytest.raises(ServiceUnavailableException):
        await get_current_user("tok", _client(outcome), _users(user))


async def test_token_without_local_user() -> None:
    with pytest.raises(UnauthorizedException, match="not associated"):
        await get_current_user(
            "tok", _client(AuthOutcome(success=True, valid=True)), _users(None)
        )
