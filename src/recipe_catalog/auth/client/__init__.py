"""Clients for the external authentication API."""

from recipe_catalog.auth.client.external_auth import (
    ExternalAuthClient,
    map_error_message,
    parse_expiration,
)


__all__ = [
    "ExternalAuthClient",
    "map_error_message",
    "parse_expiration",
]
