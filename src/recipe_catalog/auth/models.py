"""Result model shared by every external authentication call."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthOutcome(BaseModel):
    """Uniform result of a call to the remote authentication API.

    ``success`` reports whether the call completed and the remote service
    accepted it. ``valid`` is only set by token validation, where a
    completed call can still report a rejected token (``success=True``,
    ``valid=False``).

    ``status_code`` is only present when a non-2xx response was received.
    ``message`` is always present on failure.
    """

    model_config = ConfigDict(frozen=True)

    success: bool = Field(..., description="Remote call completed and was accepted")
    token: str | None = Field(default=None, description="Bearer credential")
    expires_at: datetime | None = Field(
        default=None, description="Absolute token expiry (UTC)"
    )
    refresh_token: str | None = None
    user_data: Any = Field(
        default=None, description="Provider user attributes, passed through as-is"
    )
    message: str | None = None
    error_code: str | None = Field(
        default=None, description="Machine-readable failure category"
    )
    status_code: int | None = Field(
        default=None, description="HTTP status of a received error response"
    )
    valid: bool | None = Field(default=None, description="Token validation verdict")
