"""PostgreSQL connection pool management.

The pool is created during application startup and closed on shutdown
(see ``recipe_catalog.core.events.lifespan``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncpg

from recipe_catalog.core.config import Settings, get_settings
from recipe_catalog.database.schema import SCHEMA_STATEMENTS
from recipe_catalog.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

logger = get_logger(__name__)

_pool: Pool | None = None


async def init_database_pool(settings: Settings | None = None) -> Pool:
    """Create the connection pool and, if configured, the tables.

    Args:
        settings: Settings override, defaults to ``get_settings()``.

    Returns:
        The initialized pool.
    """
    global _pool  # noqa: PLW0603

    settings = settings or get_settings()

    logger.info(
        "Initializing database connection pool",
        url=settings.database_url,
    )

    pool = await asyncpg.create_pool(
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
        user=settings.database.user,
        password=settings.DATABASE_PASSWORD or None,
        min_size=settings.database.min_pool_size,
        max_size=settings.database.max_pool_size,
        command_timeout=settings.database.command_timeout,
        ssl=True if settings.database.ssl else None,
    )

    try:
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
            if settings.database.create_schema:
                for statement in SCHEMA_STATEMENTS:
                    await conn.execute(statement)
    except asyncpg.PostgresError:
        logger.exception("Failed to prepare database")
        await pool.close()
        raise

    _pool = pool
    logger.info("Database connection established successfully")
    return pool


async def close_database_pool() -> None:
    """Close the connection pool if it was created."""
    global _pool  # noqa: PLW0603

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Database connection pool closed")


def get_database_pool() -> Pool:
    """Get the database connection pool.

    Raises:
        RuntimeError: If pool is not initialized.
    """
    if _pool is None:
        msg = "Database pool not initialized. Call init_database_pool() first."
        raise RuntimeError(msg)
    return _pool


async def check_database_health() -> dict[str, str]:
    """Report database status for the readiness probe."""
    if _pool is None:
        return {"database": "not_initialized"}

    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except (asyncpg.PostgresError, OSError):
        logger.exception("Database health check failed")
        return {"database": "unhealthy"}

    return {"database": "healthy"}
