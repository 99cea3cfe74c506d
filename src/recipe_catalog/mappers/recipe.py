"""Record-to-response mappers.

Response schemas forbid extra fields, so records are mapped field by
field instead of dumped wholesale.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recipe_catalog.schemas import (
    AuthTokenResponse,
    CategoryResponse,
    RecipeResponse,
    UserResponse,
)


if TYPE_CHECKING:
    from recipe_catalog.auth.models import AuthOutcome
    from recipe_catalog.database.repositories import (
        CategoryRecord,
        RecipeRecord,
        UserRecord,
    )


def build_category_response(category: CategoryRecord) -> CategoryResponse:
    """Map a category row to its API shape."""
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description,
    )


def build_recipe_response(recipe: RecipeRecord) -> RecipeResponse:
    """Map a recipe row (with optional embedded category) to its API shape."""
    return RecipeResponse(
        id=recipe.id,
        title=recipe.title,
        image=recipe.image,
        description=recipe.description,
        ingredients=recipe.ingredients,
        instructions=recipe.instructions,
        user_id=recipe.user_id,
        category_id=recipe.category_id,
        price=float(recipe.price) if recipe.price is not None else None,
        created_at=recipe.created_at,
        updated_at=recipe.updated_at,
        category=(
            build_category_response(recipe.category) if recipe.category else None
        ),
    )


def build_user_response(user: UserRecord) -> UserResponse:
    """Public fields of a user; never the password hash or tokens."""
    return UserResponse(id=user.id, name=user.name, email=user.email)


def build_auth_token_response(
    user: UserRecord,
    outcome: AuthOutcome,
) -> AuthTokenResponse:
    """Combine the local user and the token set the remote API issued."""
    return AuthTokenResponse(
        user=build_user_response(user),
        token=outcome.token,
        expires_at=outcome.expires_at,
        refresh_token=outcome.refresh_token,
    )
