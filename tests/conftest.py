"""Shared test configuration for the Recipe Catalog service tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest


# Must be set before settings are first loaded
os.environ["APP_ENV"] = "test"
os.environ.setdefault("EXTERNAL_AUTH_API_KEY", "test-api-key")

from recipe_catalog.core.config import get_settings  # noqa: E402


if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Give each test freshly loaded settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
