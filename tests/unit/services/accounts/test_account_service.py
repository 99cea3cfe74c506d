"""Unit tests for AccountService."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

from recipe_catalog.auth.models import AuthOutcome
from recipe_catalog.database.repositories import UserRecord
from recipe_catalog.schemas import LoginRequest, RegisterRequest
from recipe_catalog.services.accounts import (
    AccountService,
    EmailAlreadyRegisteredError,
    ExternalAuthError,
    MissingTokenError,
)


pytestmark = pytest.mark.unit

EXPIRY = datetime(2030, 1, 1, tzinfo=UTC)


# =============================================================================
# Fixtures
# =============================================================================


def _user(**overrides: object) -> UserRecord:
    data: dict[str, object] = {
        "id": 1,
        "name": "Ada",
        "email": "ada@example.com",
        "password_hash": "hashed",
        "api_token": "old-token",
        "refresh_token": "old-refresh",
    }
    data.update(overrides)
    return UserRecord.model_validate(data)


def _issued(**overrides: object) -> AuthOutcome:
    data: dict[str, object] = {
        "success": True,
        "token": "new-token",
        "expires_at": EXPIRY,
        "refresh_token": "new-refresh",
        "user_data": {"name": "Ada Lovelace"},
    }
    data.update(overrides)
    return AuthOutcome.model_validate(data)


@pytest.fixture
def auth_client() -> MagicMock:
    """Mock external auth client."""
    client = MagicMock()
    client.register = AsyncMock(return_value=_issued())
    client.login = AsyncMock(return_value=_issued())
    client.refresh_token = AsyncMock(return_value=_issued())
    client.logout = AsyncMock(
        return_value=AuthOutcome(success=True, message="Logged out successfully")
    )
    return client


@pytest.fixture
def users() -> MagicMock:
    """Mock user repository."""
    repo = MagicMock()
    repo.email_exists = AsyncMock(return_value=False)
    repo.get_by_email = AsyncMock(return_value=None)
    repo.create = AsyncMock(return_value=_user(api_token="new-token"))
    repo.update_tokens = AsyncMock(return_value=_user(api_token="new-token"))
    return repo


@pytest.fixture
def service(auth_client: MagicMock, users: MagicMock) -> AccountService:
    """Service under test."""
    return AccountService(auth_client, users)


@pytest.fixture
def register_request() -> RegisterRequest:
    """Valid registration form."""
    return RegisterRequest(
        name="Ada",
        email="Ada@Example.com",
        password="correct-horse",
        password_confirmation="correct-horse",
    )


# =============================================================================
# register
# =============================================================================


class TestRegister:
    """Tests for register()."""

    async def test_creates_local_user_with_tokens(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
        register_request: RegisterRequest,
    ) -> None:
        """Should register remotely and persist the issued tokens."""
        with patch(
            "recipe_catalog.services.accounts.service.hash_password",
            return_value="pbkdf2-hash",
        ):
            result = await service.register(register_request)

        auth_client.register.assert_awaited_once_with(
            "Ada", "ada@example.com", "correct-horse"
        )
        users.create.assert_awaited_once_with(
            name="Ada",
            email="ada@example.com",
            password_hash="pbkdf2-hash",
            api_token="new-token",
            token_expires_at=EXPIRY,
            refresh_token="new-refresh",
        )
        assert result.outcome.token == "new-token"
        assert result.user.api_token == "new-token"

    async def test_duplicate_email_skips_remote_call(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
        register_request: RegisterRequest,
    ) -> None:
        """A locally known email should be rejected before calling out."""
        users.email_exists.return_value = True

        with pytest.raises(EmailAlreadyRegisteredError):
            await service.register(register_request)

        auth_client.register.assert_not_awaited()

    async def test_remote_failure_creates_no_user(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
        register_request: RegisterRequest,
    ) -> None:
        """A rejected registration should not touch the user table."""
        rejected = AuthOutcome(
            success=False,
            message="User already exists",
            error_code="API_ERROR_409",
            status_code=409,
        )
        auth_client.register.return_value = rejected

        with pytest.raises(ExternalAuthError) as exc_info:
            await service.register(register_request)

        assert exc_info.value.outcome is rejected
        users.create.assert_not_awaited()

    async def test_unique_violation_maps_to_duplicate(
        self,
        service: AccountService,
        users: MagicMock,
        register_request: RegisterRequest,
    ) -> None:
        """A race on the unique email index should read as a duplicate."""
        users.create.side_effect = asyncpg.UniqueViolationError("duplicate key")

        with pytest.raises(EmailAlreadyRegisteredError):
            await service.register(register_request)


# =============================================================================
# login
# =============================================================================


class TestLogin:
    """Tests for login()."""

    async def test_updates_tokens_of_existing_user(
        self,
        service: AccountService,
        users: MagicMock,
    ) -> None:
        """Known users should get the new token set stored."""
        users.get_by_email.return_value = _user()

        result = await service.login(
            LoginRequest(email="ada@example.com", password="correct-horse")
        )

        users.update_tokens.assert_awaited_once_with(
            1,
            api_token="new-token",
            token_expires_at=EXPIRY,
            refresh_token="new-refresh",
        )
        users.create.assert_not_awaited()
        assert result.user.api_token == "new-token"

    async def test_creates_missing_local_user(
        self,
        service: AccountService,
        users: MagicMock,
    ) -> None:
        """A remote account without a local record gets one."""
        await service.login(
            LoginRequest(email="ada@example.com", password="correct-horse")
        )

        kwargs = users.create.await_args.kwargs
        assert kwargs["name"] == "Ada Lovelace"
        assert kwargs["email"] == "ada@example.com"
        assert kwargs["api_token"] == "new-token"

    async def test_name_falls_back_to_email(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
    ) -> None:
        """Without a remote name, the email local part is used."""
        auth_client.login.return_value = _issued(user_data=None)

        await service.login(
            LoginRequest(email="grace@example.com", password="correct-horse")
        )

        assert users.create.await_args.kwargs["name"] == "grace"

    async def test_rejected_credentials(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
    ) -> None:
        """Remote rejection should raise and leave the store untouched."""
        auth_client.login.return_value = AuthOutcome(
            success=False,
            message="Invalid credentials",
            error_code="API_ERROR_401",
            status_code=401,
        )

        with pytest.raises(ExternalAuthError):
            await service.login(
                LoginRequest(email="ada@example.com", password="wrong")
            )

        users.get_by_email.assert_not_awaited()


# =============================================================================
# refresh / logout
# =============================================================================


class TestRefresh:
    """Tests for refresh()."""

    async def test_keeps_values_the_remote_omits(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
    ) -> None:
        """Missing token/refresh token in the response keep the stored ones."""
        auth_client.refresh_token.return_value = AuthOutcome(success=True)

        await service.refresh(_user())

        auth_client.refresh_token.assert_awaited_once_with("old-token")
        users.update_tokens.assert_awaited_once_with(
            1,
            api_token="old-token",
            token_expires_at=None,
            refresh_token="old-refresh",
        )

    async def test_requires_stored_token(self, service: AccountService) -> None:
        with pytest.raises(MissingTokenError):
            await service.refresh(_user(api_token=None))

    async def test_remote_failure(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
    ) -> None:
        auth_client.refresh_token.return_value = AuthOutcome(
            success=False,
            message="Failed to refresh authentication token",
            error_code="REFRESH_ERROR",
        )

        with pytest.raises(ExternalAuthError):
            await service.refresh(_user())

        users.update_tokens.assert_not_awaited()


class TestLogout:
    """Tests for logout()."""

    async def test_clears_tokens_on_success(
        self,
        service: AccountService,
        users: MagicMock,
    ) -> None:
        outcome = await service.logout(_user())

        assert outcome.success is True
        users.update_tokens.assert_awaited_once_with(
            1, api_token=None, token_expires_at=None, refresh_token=None
        )

    async def test_keeps_tokens_on_failure(
        self,
        service: AccountService,
        auth_client: MagicMock,
        users: MagicMock,
    ) -> None:
        auth_client.logout.return_value = AuthOutcome(
            success=False, message="Logout failed"
        )

        outcome = await service.logout(_user())

        assert outcome.success is False
        users.update_tokens.assert_not_awaited()
