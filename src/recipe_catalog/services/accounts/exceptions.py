"""Account service exceptions.

Raised by :class:`~recipe_catalog.services.accounts.service.AccountService`
and converted to HTTP responses by the auth endpoints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from recipe_catalog.auth.models import AuthOutcome


class AccountError(Exception):
    """Base exception for account operations."""


class EmailAlreadyRegisteredError(AccountError):
    """Raised when the email already belongs to a local user."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("The email has already been taken")


class ExternalAuthError(AccountError):
    """Raised when the external authentication API rejected or missed a call.

    The normalized outcome is kept so callers can surface its message and
    error code.
    """

    def __init__(self, outcome: AuthOutcome) -> None:
        self.outcome = outcome
        super().__init__(outcome.message or "Authentication service request failed")


class MissingTokenError(AccountError):
    """Raised when an operation needs a stored token the user does not have."""

    def __init__(self) -> None:
        super().__init__("No authentication token stored for this user")
