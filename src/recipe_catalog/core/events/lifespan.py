"""Application lifespan event handlers.

Startup order: logging, database pool, external auth client, image store.
Shutdown releases them in reverse.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from recipe_catalog.auth.client import ExternalAuthClient
from recipe_catalog.core.config import Settings, get_settings
from recipe_catalog.database.connection import close_database_pool, init_database_pool
from recipe_catalog.observability.logging import get_logger, setup_logging
from recipe_catalog.storage import ImageStore


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

logger = get_logger(__name__)


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize application resources.

    Args:
        app: The FastAPI application instance.
        settings: Application settings.
    """
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    # The catalog is unusable without its database
    try:
        await init_database_pool(settings)
    except Exception:
        logger.exception("Failed to initialize database pool")
        raise

    await _init_external_auth_client(app, settings)

    app.state.image_store = ImageStore(
        settings.storage.image_dir,
        max_size_kb=settings.storage.max_image_size_kb,
    )
    logger.info("Image store ready", root=settings.storage.image_dir)

    logger.info("Application startup complete")


async def _init_external_auth_client(app: FastAPI, settings: Settings) -> None:
    """Create the external auth client; without a URL auth routes answer 503."""
    if not settings.external_auth.url:
        logger.warning("external_auth.url not configured - authentication unavailable")
        app.state.external_auth_client = None
        return

    if not settings.EXTERNAL_AUTH_API_KEY:
        logger.warning("EXTERNAL_AUTH_API_KEY is empty")

    client = ExternalAuthClient(
        base_url=settings.external_auth.url,
        api_key=settings.EXTERNAL_AUTH_API_KEY,
        timeout=settings.external_auth.timeout,
        api_key_header=settings.external_auth.api_key_header,
    )
    await client.initialize()
    app.state.external_auth_client = client


async def _shutdown(app: FastAPI) -> None:
    """Release application resources.

    Args:
        app: The FastAPI application instance.
    """
    logger.info("Shutting down application")

    client: ExternalAuthClient | None = getattr(
        app.state, "external_auth_client", None
    )
    if client is not None:
        await client.shutdown()
        app.state.external_auth_client = None

    await close_database_pool()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    await _startup(app, settings)
    try:
        yield
    finally:
        await _shutdown(app)
