"""Repository classes for data access."""

from recipe_catalog.database.repositories.categories import (
    CategoryRecord,
    CategoryRepository,
)
from recipe_catalog.database.repositories.recipes import (
    MAX_PRICE,
    RecipeRecord,
    RecipeRepository,
    RecipeWrite,
)
from recipe_catalog.database.repositories.users import UserRecord, UserRepository


__all__ = [
    "MAX_PRICE",
    "CategoryRecord",
    "CategoryRepository",
    "RecipeRecord",
    "RecipeRepository",
    "RecipeWrite",
    "UserRecord",
    "UserRepository",
]
