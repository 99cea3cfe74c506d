"""Rate limiting using SlowAPI.

Register and login are limited per client IP to slow down credential
stuffing against the external authentication API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from recipe_catalog.core.config import get_settings
from recipe_catalog.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

logger = get_logger(__name__)


def _get_auth_rate_limit_key(request: Request) -> str:
    """Rate limit auth endpoints by IP address."""
    return f"auth:{get_remote_address(request)}"


def create_limiter() -> Limiter:
    """Create the limiter from settings."""
    settings = get_settings()

    return Limiter(
        key_func=get_remote_address,
        storage_uri=settings.rate_limiting.storage_uri,
        strategy="fixed-window",
        headers_enabled=False,
    )


limiter = create_limiter()


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Answer 429 in the service's error envelope."""
    assert isinstance(exc, RateLimitExceeded)
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        method=request.method,
        client_ip=get_remote_address(request),
        limit=str(exc.detail),
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMIT_EXCEEDED",
            "message": "Too many requests. Please try again later",
            "details": None,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


def setup_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter and its 429 handler to the application."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def rate_limit_auth() -> Any:
    """Apply the auth-specific limit (stricter, IP-based).

    Example:
        @router.post("/login")
        @rate_limit_auth()
        async def login(request: Request):
            ...
    """
    settings = get_settings()
    return limiter.limit(
        settings.rate_limiting.auth, key_func=_get_auth_rate_limit_key
    )
