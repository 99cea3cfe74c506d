"""Request correlation middleware.

Every request gets an ID, taken from the incoming ``X-Request-ID`` header
when a caller (or proxy) already assigned one. The ID is stored on
``request.state``, bound to the logging context and echoed on the response
so error envelopes and log lines can be matched up.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from recipe_catalog.observability.logging import bind_context, clear_context


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a request ID and expose it to handlers, logs and the client."""

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Bind the request ID for the lifetime of the request."""
        clear_context()

        request_id = self._incoming_id(request) or uuid.uuid4().hex
        request.state.request_id = request_id
        bind_context(request_id=request_id)

        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response

    def _incoming_id(self, request: Request) -> str | None:
        value = request.headers.get(self.header_name, "").strip()
        # Oversized values are not trusted as IDs
        if not value or len(value) > MAX_REQUEST_ID_LENGTH:
            return None
        return value
