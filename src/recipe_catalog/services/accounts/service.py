"""Registration and login against the external authentication API.

The remote API owns credentials; the local ``users`` table mirrors each
account (email, name, password hash) and stores the token set the remote
API issued so incoming bearer tokens can be matched to a user.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import asyncpg
from pydantic import BaseModel

from recipe_catalog.auth.models import AuthOutcome
from recipe_catalog.auth.passwords import hash_password
from recipe_catalog.database.repositories.users import UserRecord
from recipe_catalog.observability.logging import get_logger
from recipe_catalog.services.accounts.exceptions import (
    EmailAlreadyRegisteredError,
    ExternalAuthError,
    MissingTokenError,
)


if TYPE_CHECKING:
    from recipe_catalog.auth.client import ExternalAuthClient
    from recipe_catalog.database.repositories.users import UserRepository
    from recipe_catalog.schemas.auth import LoginRequest, RegisterRequest

logger = get_logger(__name__)


class AuthenticatedUser(BaseModel):
    """A local user together with the outcome that authenticated them."""

    user: UserRecord
    outcome: AuthOutcome


class AccountService:
    """Account workflows combining the remote API and the user store.

    Example:
        ```python
        service = AccountService(auth_client, UserRepository())
        result = await service.register(RegisterRequest(...))
        ```
    """

    def __init__(
        self,
        auth_client: ExternalAuthClient,
        users: UserRepository,
    ) -> None:
        self._auth_client = auth_client
        self._users = users

    async def register(self, request: RegisterRequest) -> AuthenticatedUser:
        """Register with the remote API, then create the local user.

        Args:
            request: Validated registration form.

        Returns:
            The created user and the remote outcome.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken locally.
            ExternalAuthError: If the remote API did not accept the registration.
        """
        if await self._users.email_exists(request.email):
            raise EmailAlreadyRegisteredError(request.email)

        outcome = await self._auth_client.register(
            request.name, request.email, request.password
        )
        if not outcome.success:
            logger.info(
                "Registration rejected by external auth API",
                email=request.email,
                error_code=outcome.error_code,
            )
            raise ExternalAuthError(outcome)

        password_hash = await asyncio.to_thread(hash_password, request.password)
        try:
            user = await self._users.create(
                name=request.name,
                email=request.email,
                password_hash=password_hash,
                api_token=outcome.token,
                token_expires_at=outcome.expires_at,
                refresh_token=outcome.refresh_token,
            )
        except asyncpg.UniqueViolationError:
            raise EmailAlreadyRegisteredError(request.email) from None

        logger.info("User registered", user_id=user.id)
        return AuthenticatedUser(user=user, outcome=outcome)

    async def login(self, request: LoginRequest) -> AuthenticatedUser:
        """Log in with the remote API and store the issued tokens.

        A remote account without a local record (e.g. registered elsewhere)
        gets one on first login.

        Raises:
            ExternalAuthError: If the remote API did not accept the credentials.
        """
        outcome = await self._auth_client.login(request.email, request.password)
        if not outcome.success:
            logger.info(
                "Login rejected by external auth API",
                email=request.email,
                error_code=outcome.error_code,
            )
            raise ExternalAuthError(outcome)

        user = await self._users.get_by_email(request.email)
        if user is None:
            password_hash = await asyncio.to_thread(hash_password, request.password)
            user = await self._users.create(
                name=self._display_name(outcome, request.email),
                email=request.email,
                password_hash=password_hash,
                api_token=outcome.token,
                token_expires_at=outcome.expires_at,
                refresh_token=outcome.refresh_token,
            )
        else:
            user = await self._store_tokens(
                user,
                api_token=outcome.token,
                outcome=outcome,
                refresh_token=outcome.refresh_token,
            )

        logger.info("User logged in", user_id=user.id)
        return AuthenticatedUser(user=user, outcome=outcome)

    async def refresh(self, user: UserRecord) -> AuthenticatedUser:
        """Refresh the user's stored token.

        Values the remote API leaves out (token, refresh token) keep their
        stored value.

        Raises:
            MissingTokenError: If the user has no stored token.
            ExternalAuthError: If the remote API refused or could not be reached.
        """
        if not user.api_token:
            raise MissingTokenError()

        outcome = await self._auth_client.refresh_token(user.api_token)
        if not outcome.success:
            raise ExternalAuthError(outcome)

        updated = await self._store_tokens(
            user,
            api_token=outcome.token or user.api_token,
            outcome=outcome,
            refresh_token=outcome.refresh_token or user.refresh_token,
        )
        return AuthenticatedUser(user=updated, outcome=outcome)

    async def logout(self, user: UserRecord) -> AuthOutcome:
        """Log out remotely and, if that worked, forget the stored tokens.

        Raises:
            MissingTokenError: If the user has no stored token.
        """
        if not user.api_token:
            raise MissingTokenError()

        outcome = await self._auth_client.logout(user.api_token)
        if outcome.success:
            await self._users.update_tokens(
                user.id, api_token=None, token_expires_at=None, refresh_token=None
            )
            logger.info("User logged out", user_id=user.id)
        return outcome

    async def _store_tokens(
        self,
        user: UserRecord,
        *,
        api_token: str | None,
        outcome: AuthOutcome,
        refresh_token: str | None,
    ) -> UserRecord:
        updated = await self._users.update_tokens(
            user.id,
            api_token=api_token,
            token_expires_at=outcome.expires_at,
            refresh_token=refresh_token,
        )
        return updated or user

    @staticmethod
    def _display_name(outcome: AuthOutcome, email: str) -> str:
        if isinstance(outcome.user_data, dict):
            name = outcome.user_data.get("name")
            if isinstance(name, str) and name.strip():
                return name.strip()
        return email.split("@", 1)[0]
