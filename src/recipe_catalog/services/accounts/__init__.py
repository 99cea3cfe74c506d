"""User accounts backed by the external authentication API."""

from recipe_catalog.services.accounts.exceptions import (
    AccountError,
    EmailAlreadyRegisteredError,
    ExternalAuthError,
    MissingTokenError,
)
from recipe_catalog.services.accounts.service import AccountService, AuthenticatedUser


__all__ = [
    "AccountError",
    "AccountService",
    "AuthenticatedUser",
    "EmailAlreadyRegisteredError",
    "ExternalAuthError",
    "MissingTokenError",
]
