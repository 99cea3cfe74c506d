"""Unit tests for UserRepository."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from recipe_catalog.database.repositories import UserRecord, UserRepository


pytestmark = pytest.mark.unit


@pytest.fixture
def repository(mock_pool: MagicMock) -> UserRepository:
    """Repository on the mocked pool."""
    return UserRepository(pool=mock_pool)


@pytest.fixture
def user_row() -> dict[str, object]:
    """Sample users row."""
    return {
        "id": 5,
        "name": "Ada",
        "email": "ada@example.com",
        "password_hash": "hash",
        "api_token": "tok",
        "token_expires_at": datetime(2030, 1, 1, tzinfo=UTC),
        "refresh_token": "ref",
        "created_at": datetime(2026, 1, 1, tzinfo=UTC),
        "updated_at": datetime(2026, 1, 1, tzinfo=UTC),
    }


class TestLookups:
    """Tests for single-user lookups."""

    async def test_get_by_api_token(
        self,
        repository: UserRepository,
        mock_conn: MagicMock,
        user_row: dict[str, object],
    ) -> None:
        mock_conn.fetchrow.return_value = user_row

        user = await repository.get_by_api_token("tok")

        assert isinstance(user, UserRecord)
        assert user.id == 5
        assert mock_conn.fetchrow.await_args.args[1] == "tok"

    async def test_get_by_email_missing(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        assert await repository.get_by_email("nobody@example.com") is None
        query = mock_conn.fetchrow.await_args.args[0]
        assert "LOWER($1)" in query

    async def test_email_exists(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        mock_conn.fetchval.return_value = True
        assert await repository.email_exists("ada@example.com") is True

        mock_conn.fetchval.return_value = False
        assert await repository.email_exists("ada@example.com") is False


class TestWrites:
    """Tests for inserts and token updates."""

    async def test_create(
        self,
        repository: UserRepository,
        mock_conn: MagicMock,
        user_row: dict[str, object],
    ) -> None:
        mock_conn.fetchrow.return_value = user_row

        user = await repository.create(
            name="Ada",
            email="Ada@example.com",
            password_hash="hash",
            api_token="tok",
        )

        assert user.email == "ada@example.com"
        args = mock_conn.fetchrow.await_args.args
        assert "INSERT INTO users" in args[0]
        assert args[1:] == ("Ada", "Ada@example.com", "hash", "tok", None, None)

    async def test_update_tokens_clears(
        self,
        repository: UserRepository,
        mock_conn: MagicMock,
        user_row: dict[str, object],
    ) -> None:
        mock_conn.fetchrow.return_value = {
            **user_row,
            "api_token": None,
            "token_expires_at": None,
            "refresh_token": None,
        }

        user = await repository.update_tokens(
            5, api_token=None, token_expires_at=None, refresh_token=None
        )

        assert user is not None
        assert user.api_token is None
        assert mock_conn.fetchrow.await_args.args[1:] == (5, None, None, None)

    async def test_update_tokens_missing_user(
        self, repository: UserRepository
    ) -> None:
        result = await repository.update_tokens(
            99, api_token="t", token_expires_at=None, refresh_token=None
        )
        assert result is None
