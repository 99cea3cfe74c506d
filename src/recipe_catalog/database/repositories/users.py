"""User record repository.

Users are keyed by email (unique). A record also stores the token set the
external authentication API issued on the last register/login/refresh.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from pydantic import BaseModel

from recipe_catalog.database.connection import get_database_pool
from recipe_catalog.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool, Record

logger = get_logger(__name__)


class UserRecord(BaseModel):
    """Row of the ``users`` table."""

    id: int
    name: str
    email: str
    password_hash: str
    api_token: str | None = None
    token_expires_at: datetime | None = None
    refresh_token: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


_USER_COLUMNS = """
    id, name, email, password_hash, api_token, token_expires_at,
    refresh_token, created_at, updated_at
"""


class UserRepository:
    """Data access for the ``users`` table."""

    def __init__(self, pool: Pool | None = None) -> None:
        """Initialize repository with optional connection pool.

        Args:
            pool: asyncpg connection pool. If None, uses global pool.
        """
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    async def get_by_email(self, email: str) -> UserRecord | None:
        """Get a user by email (case-insensitive)."""
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE email = LOWER($1)"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, email)
        return self._row_to_user(row) if row else None

    async def get_by_api_token(self, api_token: str) -> UserRecord | None:
        """Get the user currently holding an external API token."""
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE api_token = $1"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, api_token)
        return self._row_to_user(row) if row else None

    async def email_exists(self, email: str) -> bool:
        """Check whether an email is already registered."""
        query = "SELECT EXISTS(SELECT 1 FROM users WHERE email = LOWER($1))"
        async with self.pool.acquire() as conn:
            return bool(await conn.fetchval(query, email))

    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        api_token: str | None = None,
        token_expires_at: datetime | None = None,
        refresh_token: str | None = None,
    ) -> UserRecord:
        """Insert a user.

        Raises:
            asyncpg.UniqueViolationError: If the email is already taken.
        """
        query = f"""
            INSERT INTO users (
                name, email, password_hash, api_token, token_expires_at, refresh_token
            )
            VALUES ($1, LOWER($2), $3, $4, $5, $6)
            RETURNING {_USER_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query,
                name,
                email,
                password_hash,
                api_token,
                token_expires_at,
                refresh_token,
            )
        user = self._row_to_user(row)
        logger.info("User created", user_id=user.id)
        return user

    async def update_tokens(
        self,
        user_id: int,
        *,
        api_token: str | None,
        token_expires_at: datetime | None,
        refresh_token: str | None,
    ) -> UserRecord | None:
        """Replace the stored token set; None values clear the columns."""
        query = f"""
            UPDATE users
            SET api_token = $2,
                token_expires_at = $3,
                refresh_token = $4,
                updated_at = now()
            WHERE id = $1
            RETURNING {_USER_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query, user_id, api_token, token_expires_at, refresh_token
            )
        return self._row_to_user(row) if row else None

    @staticmethod
    def _row_to_user(row: Record) -> UserRecord:
        return UserRecord.model_validate(dict(row))
