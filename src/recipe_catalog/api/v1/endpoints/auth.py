"""Authentication endpoints.

Credentials are checked by the external authentication API; these routes
relay its verdict and keep the local user record in step.

Provides:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- GET /auth/validate
- POST /auth/logout
"""

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, Request, status

from recipe_catalog.api.dependencies import (
    get_account_service,
    get_external_auth_client,
)
from recipe_catalog.auth.client import ExternalAuthClient  # noqa: TC001
from recipe_catalog.auth.dependencies import CurrentUser, get_bearer_token
from recipe_catalog.core.exceptions import (
    ExternalAuthException,
    UnauthorizedException,
    ValidationException,
)
from recipe_catalog.core.rate_limit import rate_limit_auth
from recipe_catalog.mappers import build_auth_token_response
from recipe_catalog.observability.logging import get_logger
from recipe_catalog.schemas import (
    AuthTokenResponse,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    ValidateTokenResponse,
)
from recipe_catalog.services.accounts import (
    AccountError,
    AccountService,
    EmailAlreadyRegisteredError,
    ExternalAuthError,
    MissingTokenError,
)


logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

_EXTERNAL_ERRORS: dict[int | str, dict[str, str]] = {
    401: {"description": "Rejected by the authentication service"},
    422: {"description": "Request validation error"},
    503: {"description": "Authentication service unavailable"},
}


def _raise_http(exc: AccountError) -> NoReturn:
    """Translate an account error into its HTTP exception."""
    if isinstance(exc, EmailAlreadyRegisteredError):
        raise ValidationException("email", str(exc)) from exc
    if isinstance(exc, ExternalAuthError):
        raise ExternalAuthException(exc.outcome) from exc
    if isinstance(exc, MissingTokenError):
        raise UnauthorizedException(str(exc)) from exc
    raise exc


@router.post(
    "/register",
    response_model=AuthTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    responses={**_EXTERNAL_ERRORS, 429: {"description": "Too many attempts"}},
)
@rate_limit_auth()
async def register(
    request: Request,  # noqa: ARG001
    payload: RegisterRequest,
    accounts: Annotated[AccountService, Depends(get_account_service)],
) -> AuthTokenResponse:
    """Register with the authentication service and create the local user."""
    try:
        result = await accounts.register(payload)
    except AccountError as e:
        _raise_http(e)
    return build_auth_token_response(result.user, result.outcome)


@router.post(
    "/login",
    response_model=AuthTokenResponse,
    summary="Log in",
    responses={**_EXTERNAL_ERRORS, 429: {"description": "Too many attempts"}},
)
@rate_limit_auth()
async def login(
    request: Request,  # noqa: ARG001
    payload: LoginRequest,
    accounts: Annotated[AccountService, Depends(get_account_service)],
) -> AuthTokenResponse:
    """Exchange credentials for a token set."""
    try:
        result = await accounts.login(payload)
    except AccountError as e:
        _raise_http(e)
    return build_auth_token_response(result.user, result.outcome)


@router.post(
    "/refresh",
    response_model=AuthTokenResponse,
    summary="Refresh the current token",
    responses=_EXTERNAL_ERRORS,
)
async def refresh(
    user: CurrentUser,
    accounts: Annotated[AccountService, Depends(get_account_service)],
) -> AuthTokenResponse:
    """Replace the caller's token with a fresh one."""
    try:
        result = await accounts.refresh(user)
    except AccountError as e:
        _raise_http(e)
    return build_auth_token_response(result.user, result.outcome)


@router.get(
    "/validate",
    response_model=ValidateTokenResponse,
    summary="Validate a bearer token",
    responses={503: {"description": "Authentication service unavailable"}},
)
async def validate(
    token: Annotated[str, Depends(get_bearer_token)],
    auth_client: Annotated[ExternalAuthClient, Depends(get_external_auth_client)],
) -> ValidateTokenResponse:
    """Report whether the authentication service still accepts the token."""
    outcome = await auth_client.validate_token(token)
    if not outcome.success:
        raise ExternalAuthException(outcome)
    return ValidateTokenResponse(
        valid=bool(outcome.valid),
        user=outcome.user_data,
        message=outcome.message,
    )


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Log out",
)
async def logout(
    user: CurrentUser,
    accounts: Annotated[AccountService, Depends(get_account_service)],
) -> LogoutResponse:
    """Revoke the caller's token remotely and forget it locally."""
    try:
        outcome = await accounts.logout(user)
    except AccountError as e:
        _raise_http(e)
    if not outcome.success:
        logger.warning("Remote logout failed", user_id=user.id)
    return LogoutResponse(success=outcome.success, message=outcome.message)
