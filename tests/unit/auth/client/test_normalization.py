"""Unit tests for the auth response normalization helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from recipe_catalog.auth.client import map_error_message, parse_expiration
from recipe_catalog.auth.client.external_auth import (
    extract_error_message,
    normalize_error,
    normalize_success,
)


pytestmark = pytest.mark.unit


class TestMapErrorMessage:
    """Tests for the status-to-message table."""

    def test_mapped_status_ignores_body(self) -> None:
        assert map_error_message(401, {"message": "bad password"}) == "Invalid credentials"

    def test_422_passes_through(self) -> None:
        assert map_error_message(422, {"message": "Name is required"}) == "Name is required"

    def test_unknown_status_passes_through(self) -> None:
        assert map_error_message(404, {"error": "Not here"}) == "Not here"

    def test_empty_body(self) -> None:
        assert map_error_message(422, {}) == "Unknown API error"


class TestExtractErrorMessage:
    """Tests for picking the remote error text."""

    def test_message_before_error(self) -> None:
        assert extract_error_message({"message": "a", "error": "b"}) == "a"

    def test_non_string_is_stringified(self) -> None:
        assert extract_error_message({"message": {"email": ["taken"]}}) == (
            "{'email': ['taken']}"
        )


class TestParseExpiration:
    """Tests for parse_expiration()."""

    def test_absolute_iso(self) -> None:
        result = parse_expiration({"expires_at": "2030-05-01T10:00:00+02:00"})
        assert result == datetime(2030, 5, 1, 8, tzinfo=UTC)

    def test_naive_iso_is_utc(self) -> None:
        result = parse_expiration({"expires_at": "2030-05-01T10:00:00"})
        assert result == datetime(2030, 5, 1, 10, tzinfo=UTC)

    def test_epoch_seconds(self) -> None:
        result = parse_expiration({"expires_at": 1_900_000_000})
        assert result == datetime.fromtimestamp(1_900_000_000, UTC)

    def test_absolute_wins_over_relative(self) -> None:
        now = datetime(2026, 1, 1, tzinfo=UTC)
        result = parse_expiration(
            {"expires_at": "2030-01-01T00:00:00Z", "expires_in": 10}, now=now
        )
        assert result == datetime(2030, 1, 1, tzinfo=UTC)

    def test_relative_uses_reference_time(self) -> None:
        now = datetime(2026, 1, 1, tzinfo=UTC)
        assert parse_expiration({"expires_in": 90}, now=now) == now + timedelta(
            seconds=90
        )

    @freeze_time("2026-03-01 12:00:00")
    def test_relative_defaults_to_current_time(self) -> None:
        result = parse_expiration({"expires_in": "3600"})
        assert result == datetime(2026, 3, 1, 13, tzinfo=UTC)

    def test_unparseable_absolute_falls_back_to_relative(self) -> None:
        now = datetime(2026, 1, 1, tzinfo=UTC)
        result = parse_expiration(
            {"expires_at": "next tuesday", "expires_in": 60}, now=now
        )
        assert result == now + timedelta(seconds=60)

    def test_invalid_relative(self) -> None:
        assert parse_expiration({"expires_in": "soon"}) is None

    def test_fractional_relative_is_truncated(self) -> None:
        now = datetime(2026, 1, 1, tzinfo=UTC)
        assert parse_expiration({"expires_in": "3600.5"}, now=now) == now + timedelta(
            seconds=3600
        )

    @pytest.mark.parametrize("expires_in", [10**13, 10**20, 10**400, "1e30"])
    def test_out_of_range_relative(self, expires_in: object) -> None:
        """Relative expiries past the datetime range are dropped."""
        assert parse_expiration({"expires_in": expires_in}) is None

    def test_absent(self) -> None:
        assert parse_expiration({}) is None


class TestNormalize:
    """Tests for outcome construction."""

    def test_success_stringifies_numeric_token(self) -> None:
        outcome = normalize_success({"token": 12345}, operation="login")
        assert outcome.token == "12345"

    def test_error_code_from_body(self) -> None:
        outcome = normalize_error(
            409, {"error_code": "EMAIL_TAKEN", "message": "taken"}, operation="register"
        )
        assert outcome.error_code == "EMAIL_TAKEN"
        assert outcome.message == "User already exists"
        assert outcome.status_code == 409

    def test_error_code_default(self) -> None:
        outcome = normalize_error(500, {}, operation="register")
        assert outcome.error_code == "API_ERROR_500"
