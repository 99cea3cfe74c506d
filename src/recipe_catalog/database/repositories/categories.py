"""Category repository."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from pydantic import BaseModel

from recipe_catalog.database.connection import get_database_pool


if TYPE_CHECKING:
    from asyncpg import Pool


class CategoryRecord(BaseModel):
    """Row of the ``categories`` table."""

    id: int
    name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryRepository:
    """Data access for the ``categories`` table."""

    def __init__(self, pool: Pool | None = None) -> None:
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    async def list_all(self) -> list[CategoryRecord]:
        """All categories ordered by name."""
        query = (
            "SELECT id, name, description, created_at, updated_at "
            "FROM categories ORDER BY name"
        )
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)
        return [CategoryRecord.model_validate(dict(row)) for row in rows]

    async def exists(self, category_id: int) -> bool:
        """Check whether a category id refers to an existing row."""
        query = "SELECT EXISTS(SELECT 1 FROM categories WHERE id = $1)"
        async with self.pool.acquire() as conn:
            return bool(await conn.fetchval(query, category_id))

    async def create(self, name: str, description: str | None = None) -> CategoryRecord:
        """Insert a category."""
        query = """
            INSERT INTO categories (name, description)
            VALUES ($1, $2)
            RETURNING id, name, description, created_at, updated_at
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, name, description)
        return CategoryRecord.model_validate(dict(row))
