"""FastAPI security dependencies.

Bearer tokens are issued by the external authentication API. A request is
authenticated when that API still accepts the token and a local user holds
it.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from recipe_catalog.api.dependencies import (
    get_external_auth_client,
    get_user_repository,
)
from recipe_catalog.auth.client import ExternalAuthClient
from recipe_catalog.core.exceptions import (
    ServiceUnavailableException,
    UnauthorizedException,
)
from recipe_catalog.database.repositories import UserRecord, UserRepository
from recipe_catalog.observability.logging import bind_context, get_logger


logger = get_logger(__name__)

bearer_scheme = HTTPBearer(
    scheme_name="ExternalAuthToken",
    description="Token issued by the external authentication API",
    auto_error=False,
)


async def get_bearer_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> str:
    """Extract the bearer token from the Authorization header.

    Raises:
        UnauthorizedException: 401 if the header is missing or not Bearer.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Not authenticated")
    return credentials.credentials


async def get_current_user(
    token: Annotated[str, Depends(get_bearer_token)],
    auth_client: Annotated[ExternalAuthClient, Depends(get_external_auth_client)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> UserRecord:
    """Resolve the bearer token to a local user.

    Raises:
        ServiceUnavailableException: 503 if the auth API could not be reached.
        UnauthorizedException: 401 if the token is rejected or unknown locally.
    """
    outcome = await auth_client.validate_token(token)
    if not outcome.success:
        raise ServiceUnavailableException(
            outcome.message or "Authentication service not available"
        )
    if not outcome.valid:
        raise UnauthorizedException(outcome.message or "Token is invalid or expired")

    user = await users.get_by_api_token(token)
    if user is None:
        logger.info("Valid token does not belong to a local user")
        raise UnauthorizedException("Token is not associated with a user")

    bind_context(user_id=user.id)
    return user


CurrentUser = Annotated[UserRecord, Depends(get_current_user)]
