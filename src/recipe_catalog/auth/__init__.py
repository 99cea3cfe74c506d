"""Authentication: external auth API client, token dependency, passwords."""

from recipe_catalog.auth.client import ExternalAuthClient
from recipe_catalog.auth.models import AuthOutcome


__all__ = [
    "AuthOutcome",
    "ExternalAuthClient",
]
