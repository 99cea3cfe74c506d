"""Unit tests for HTTP middleware."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from recipe_catalog.core.middleware import LoggingMiddleware, RequestIDMiddleware
from recipe_catalog.core.middleware.logging import client_ip
from recipe_catalog.observability.logging import get_context


pytestmark = pytest.mark.unit


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/echo")
    async def echo(request: Request) -> dict[str, object]:
        return {
            "state": request.state.request_id,
            "context": get_context().get("request_id"),
            "client_ip": client_ip(request),
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def test_request_id_reaches_handler_and_log_context(client: AsyncClient) -> None:
    response = await client.get("/echo", headers={"X-Request-ID": "req-1"})

    assert response.headers["X-Request-ID"] == "req-1"
    assert response.json()["state"] == "req-1"
    assert response.json()["context"] == "req-1"


async def test_oversized_request_id_is_replaced(client: AsyncClient) -> None:
    response = await client.get("/echo", headers={"X-Request-ID": "x" * 500})

    assert response.headers["X-Request-ID"] != "x" * 500
    assert len(response.headers["X-Request-ID"]) == 32


async def test_client_ip_prefers_forwarded_for(client: AsyncClient) -> None:
    response = await client.get(
        "/echo", headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}
    )

    assert response.json()["client_ip"] == "203.0.113.9"
