"""Health check endpoints.

Liveness and readiness probes for load balancers and orchestrators.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field

from recipe_catalog.core.config import Settings, get_settings
from recipe_catalog.database.connection import check_database_health


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Health status", examples=["healthy"])
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Current server timestamp",
    )
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")


class ReadinessResponse(HealthResponse):
    """Readiness check response with dependency status."""

    dependencies: dict[str, str] = Field(default_factory=dict)


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Report that the process is serving requests; dependencies are not checked."""
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"description": "A dependency is unavailable"}},
)
async def readiness_check(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ORJSONResponse:
    """Check the database and the external auth client.

    Answers 503 while any dependency is not healthy.
    """
    dependencies = await check_database_health()
    auth_ready = getattr(request.app.state, "external_auth_client", None) is not None
    dependencies["external_auth"] = "configured" if auth_ready else "not_configured"

    healthy = dependencies["database"] == "healthy" and auth_ready
    body = ReadinessResponse(
        status="ready" if healthy else "degraded",
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
    )
    return ORJSONResponse(
        status_code=200 if healthy else 503,
        content=body.model_dump(mode="json"),
    )
