"""Authentication schemas for request/response validation."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any, Self

from pydantic import EmailStr, Field, field_validator, model_validator

from recipe_catalog.schemas.base import APIRequest, APIResponse


class RegisterRequest(APIRequest):
    """Registration form."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=8, description="Password (min 8 characters)")
    password_confirmation: str = Field(..., description="Must match password")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        """Emails are stored lowercase and fit the users.email column."""
        if len(v) > 255:
            msg = "The email must not be greater than 255 characters"
            raise ValueError(msg)
        return v.lower()

    @model_validator(mode="after")
    def passwords_match(self) -> Self:
        """Reject a confirmation that differs from the password."""
        if self.password != self.password_confirmation:
            msg = "The password confirmation does not match"
            raise ValueError(msg)
        return self


class LoginRequest(APIRequest):
    """Login credentials."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Password")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        """Emails are matched lowercase."""
        return v.lower()


class UserResponse(APIResponse):
    """Public view of a local user."""

    id: int
    name: str
    email: str


class AuthTokenResponse(APIResponse):
    """Token set issued by the external authentication API."""

    user: UserResponse
    token: str | None = None
    expires_at: datetime | None = None
    refresh_token: str | None = None


class ValidateTokenResponse(APIResponse):
    """Verdict of the external authentication API on a token."""

    valid: bool
    user: Any = None
    message: str | None = None


class LogoutResponse(APIResponse):
    """Result of an external logout."""

    success: bool
    message: str | None = None
