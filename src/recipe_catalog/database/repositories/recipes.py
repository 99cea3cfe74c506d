"""Recipe repository.

Recipes belong to one user and one category. Reads join the category so
callers get it embedded in the record.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Final

from pydantic import BaseModel, Field

from recipe_catalog.database.connection import get_database_pool
from recipe_catalog.database.repositories.categories import CategoryRecord
from recipe_catalog.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool, Record

logger = get_logger(__name__)

# Largest value of the NUMERIC(10, 2) price column
MAX_PRICE: Final[Decimal] = Decimal("99999999.99")


class RecipeWrite(BaseModel):
    """Columns set by create and update."""

    title: str
    description: str | None = None
    ingredients: str | None = None
    instructions: str | None = None
    category_id: int
    price: Decimal | None = Field(
        default=None, ge=0, le=MAX_PRICE, decimal_places=2
    )


class RecipeRecord(BaseModel):
    """Row of the ``recipes`` table with its category."""

    id: int
    title: str
    image: str | None = None
    description: str | None = None
    ingredients: str | None = None
    instructions: str | None = None
    user_id: int
    category_id: int
    price: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category: CategoryRecord | None = None


_SELECT_RECIPES = """
    SELECT
        r.id, r.title, r.image, r.description, r.ingredients, r.instructions,
        r.user_id, r.category_id, r.price, r.created_at, r.updated_at,
        c.name AS category_name,
        c.description AS category_description
    FROM recipes r
    LEFT JOIN categories c ON c.id = r.category_id
"""

_RECIPE_COLUMNS = """
    id, title, image, description, ingredients, instructions,
    user_id, category_id, price, created_at, updated_at
"""


class RecipeRepository:
    """Data access for the ``recipes`` table."""

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

    async def list_with_categories(self) -> list[RecipeRecord]:
        """All recipes, newest first."""
        query = f"{_SELECT_RECIPES} ORDER BY r.created_at DESC, r.id DESC"
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)
        return [self._row_to_recipe(row) for row in rows]

    async def get(self, recipe_id: int) -> RecipeRecord | None:
        """Get one recipe with its category."""
        query = f"{_SELECT_RECIPES} WHERE r.id = $1"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, recipe_id)
        return self._row_to_recipe(row) if row else None

    async def create(
        self,
        data: RecipeWrite,
        *,
        user_id: int,
        image: str | None = None,
    ) -> RecipeRecord:
        """Insert a recipe owned by ``user_id`` and return it with its category."""
        query = f"""
            INSERT INTO recipes (
                title, image, description, ingredients, instructions,
                user_id, category_id, price
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {_RECIPE_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query,
                data.title,
                image,
                data.description,
                data.ingredients,
                data.instructions,
                user_id,
                data.category_id,
                data.price,
            )
        logger.info("Recipe created", recipe_id=row["id"], user_id=user_id)
        return await self.get(row["id"]) or self._row_to_recipe(row)

    async def update(
        self,
        recipe_id: int,
        data: RecipeWrite,
        *,
        user_id: int,
        image: str | None = None,
    ) -> RecipeRecord | None:
        """Overwrite a recipe's fields.

        The stored image is kept unless a new ``image`` path is given.
        """
        query = f"""
            UPDATE recipes
            SET title = $2,
                image = COALESCE($3, image),
                description = $4,
                ingredients = $5,
                instructions = $6,
                user_id = $7,
                category_id = $8,
                price = $9,
                updated_at = now()
            WHERE id = $1
            RETURNING {_RECIPE_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query,
                recipe_id,
                data.title,
                image,
                data.description,
                data.ingredients,
                data.instructions,
                user_id,
                data.category_id,
                data.price,
            )
        if row is None:
            return None
        return await self.get(recipe_id) or self._row_to_recipe(row)

    async def delete(self, recipe_id: int) -> RecipeRecord | None:
        """Delete a recipe and return the removed row (None if missing)."""
        query = f"DELETE FROM recipes WHERE id = $1 RETURNING {_RECIPE_COLUMNS}"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, recipe_id)
        if row is None:
            return None
        logger.info("Recipe deleted", recipe_id=recipe_id)
        return self._row_to_recipe(row)

    @staticmethod
    def _row_to_recipe(row: Record) -> RecipeRecord:
        data: dict[str, Any] = dict(row)
        category_name = data.pop("category_name", None)
        category_description = data.pop("category_description", None)
        if category_name is not None:
            data["category"] = CategoryRecord(
                id=data["category_id"],
                name=category_name,
                description=category_description,
            )
        return RecipeRecord.model_validate(data)
