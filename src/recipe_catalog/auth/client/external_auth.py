"""HTTP client for the external authentication API.

Users register and log in against a remote authentication service. This
module wraps its five endpoints (register, login, refresh, validate,
logout) and turns every response, error response and transport failure
into an :class:`~recipe_catalog.auth.models.AuthOutcome`, so callers never
deal with the remote schema or with httpx exceptions.

Two response dialects are accepted on success: the token may arrive as
``token`` or ``access_token``, and the expiry as an absolute ``expires_at``
or a relative ``expires_in`` (seconds). ``expires_at`` wins when both are
present.
"""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta
from typing import Any, Final

import httpx
import orjson

from recipe_catalog.auth.models import AuthOutcome
from recipe_catalog.observability.logging import get_logger


logger = get_logger(__name__)

DEFAULT_TIMEOUT: Final[float] = 30.0
DEFAULT_API_KEY_HEADER: Final[str] = "X-API-Key"

NETWORK_ERROR: Final[str] = "NETWORK_ERROR"
REFRESH_ERROR: Final[str] = "REFRESH_ERROR"
VALIDATION_ERROR: Final[str] = "VALIDATION_ERROR"

UNKNOWN_API_ERROR: Final[str] = "Unknown API error"
NETWORK_ERROR_MESSAGE: Final[str] = (
    "Network error occurred while connecting to authentication service"
)
REFRESH_ERROR_MESSAGE: Final[str] = "Failed to refresh authentication token"
VALIDATION_ERROR_MESSAGE: Final[str] = "Failed to validate token"
INVALID_TOKEN_MESSAGE: Final[str] = "Token is invalid or expired"
LOGOUT_OK_MESSAGE: Final[str] = "Logged out successfully"
LOGOUT_FAILED_MESSAGE: Final[str] = "Logout failed"
LOGOUT_ERROR_MESSAGE: Final[str] = "Failed to logout from external service"

_SERVICE_UNAVAILABLE: Final[str] = "Authentication service is temporarily unavailable"

# 422 and unlisted codes pass the remote message through
_STATUS_MESSAGES: Final[dict[int, str]] = {
    400: "Invalid request data provided",
    401: "Invalid credentials",
    403: "Access forbidden",
    409: "User already exists",
    429: "Too many requests. Please try again later",
    500: _SERVICE_UNAVAILABLE,
    502: _SERVICE_UNAVAILABLE,
    503: _SERVICE_UNAVAILABLE,
    504: _SERVICE_UNAVAILABLE,
}


# =============================================================================
# Response normalization
# =============================================================================


def extract_error_message(body: dict[str, Any]) -> str:
    """Pick the remote error text: ``message``, then ``error``."""
    for key in ("message", "error"):
        value = body.get(key)
        if value is not None:
            return value if isinstance(value, str) else str(value)
    return UNKNOWN_API_ERROR


def map_error_message(status_code: int, body: dict[str, Any]) -> str:
    """Return the user-facing message for an error response.

    Args:
        status_code: HTTP status of the response.
        body: Parsed JSON body (empty when the body was not a JSON object).

    Returns:
        The fixed message for well-known status codes, otherwise the
        message supplied by the remote service.
    """
    mapped = _STATUS_MESSAGES.get(status_code)
    if mapped is not None:
        return mapped
    return extract_error_message(body)


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch seconds into an aware UTC datetime."""
    if isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                return None
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=UTC)
            return parsed.astimezone(UTC)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, UTC)
        except (OverflowError, OSError, ValueError):
            return None

    return None


def parse_expiration(
    data: dict[str, Any],
    *,
    now: datetime | None = None,
) -> datetime | None:
    """Derive the absolute token expiry from a response body.

    ``expires_at`` takes precedence; ``expires_in`` is added to ``now``
    only when no usable absolute value is present.

    Args:
        data: Parsed response body.
        now: Reference time for relative expiries, defaults to current UTC.

    Returns:
        Expiry as an aware UTC datetime, or None when the body carries none.
    """
    if data.get("expires_at") is not None:
        parsed = _parse_timestamp(data["expires_at"])
        if parsed is not None:
            return parsed
        logger.warning(
            "Ignoring unparseable expires_at in auth response",
            expires_at=str(data["expires_at"]),
        )

    if data.get("expires_in") is not None:
        try:
            seconds = int(float(data["expires_in"]))
        except (TypeError, ValueError, OverflowError):
            logger.warning(
                "Ignoring unparseable expires_in in auth response",
                expires_in=str(data["expires_in"]),
            )
            return None
        try:
            return (now or datetime.now(UTC)) + timedelta(seconds=seconds)
        except (OverflowError, ValueError):
            logger.warning(
                "Ignoring out-of-range expires_in in auth response",
                expires_in=seconds,
            )
            return None

    return None


def _optional_str(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def normalize_success(data: dict[str, Any], *, operation: str) -> AuthOutcome:
    """Build the outcome of an accepted register/login/refresh call."""
    token = data.get("token")
    if token is None:
        token = data.get("access_token")

    if token is None:
        logger.warning("Auth response accepted without a token", operation=operation)

    return AuthOutcome(
        success=True,
        token=_optional_str(token),
        expires_at=parse_expiration(data),
        user_data=data.get("user"),
        refresh_token=_optional_str(data.get("refresh_token")),
    )


def normalize_error(
    status_code: int,
    body: dict[str, Any],
    *,
    operation: str,
) -> AuthOutcome:
    """Build the outcome of a register/login/refresh call the remote API rejected."""
    logger.warning(
        "External auth API returned error",
        operation=operation,
        status_code=status_code,
        response=body,
    )

    error_code = body.get("error_code")
    if error_code is None:
        error_code = f"API_ERROR_{status_code}"

    return AuthOutcome(
        success=False,
        message=map_error_message(status_code, body),
        error_code=str(error_code),
        status_code=status_code,
    )


def _parse_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; anything else becomes an empty mapping."""
    try:
        data = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def token_fingerprint(token: str) -> str:
    """Short, non-reversible token identifier safe to put in logs."""
    return hashlib.sha256(token.encode()).hexdigest()[:12]


# =============================================================================
# Client
# =============================================================================


class ExternalAuthClient:
    """Async client for the external authentication API.

    None of the operations raise for HTTP or transport failures; each one
    returns an :class:`AuthOutcome`. Configuration is fixed at construction
    and no per-call state is kept on the instance, so one client can serve
    any number of concurrent requests.

    Attributes:
        base_url: Base URL of the authentication API.
        api_key: Key identifying this service to the authentication API.
        timeout: Per-request timeout in seconds.
        api_key_header: Header carrying ``api_key``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        api_key_header: str = DEFAULT_API_KEY_HEADER,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the authentication API (e.g. https://auth.example.com/api).
            api_key: API key sent on register, login and refresh.
            timeout: Per-request timeout in seconds.
            api_key_header: Name of the API key header.
            http_client: Optional pre-built client; when given, its lifecycle
                belongs to the caller.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.api_key_header = api_key_header
        self._http_client = http_client
        self._owns_client = http_client is None

    def url_for(self, endpoint: str) -> str:
        """Absolute URL of an API endpoint (``register``, ``login``, ...)."""
        return f"{self.base_url}/{endpoint}"

    async def initialize(self) -> None:
        """Create the pooled HTTP client if none was injected."""
        self._get_client()
        logger.info(
            "ExternalAuthClient initialized",
            base_url=self.base_url,
            timeout=self.timeout,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("ExternalAuthClient shutdown")

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(
                    max_keepalive_connections=10,
                    max_connections=20,
                ),
            )
            self._owns_client = True
        return self._http_client

    def _api_key_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            self.api_key_header: self.api_key,
        }

    @staticmethod
    def _bearer_headers(token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    async def _post_json(
        self,
        endpoint: str,
        payload: dict[str, Any] | None,
        headers: dict[str, str],
    ) -> httpx.Response:
        content = orjson.dumps(payload) if payload is not None else None
        return await self._get_client().post(
            self.url_for(endpoint),
            content=content,
            headers=headers,
            timeout=self.timeout,
        )

    async def _credential_call(
        self,
        operation: str,
        payload: dict[str, Any],
    ) -> httpx.Response:
        return await self._post_json(operation, payload, self._api_key_headers())

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def register(self, name: str, email: str, password: str) -> AuthOutcome:
        """Create an account on the authentication API.

        Args:
            name: Display name.
            email: Account email, also used to correlate failures in logs.
            password: Plain password, forwarded once and never logged.

        Returns:
            Normalized outcome; ``NETWORK_ERROR`` when no response arrived.
        """
        try:
            response = await self._credential_call(
                "register",
                {"name": name, "email": email, "password": password},
            )
        except httpx.RequestError as e:
            logger.error(
                "External auth request failed during registration",
                operation="register",
                email=email,
                error=str(e),
            )
            return AuthOutcome(
                success=False,
                message=NETWORK_ERROR_MESSAGE,
                error_code=NETWORK_ERROR,
            )

        return self._credential_outcome(response, operation="register")

    async def login(self, email: str, password: str) -> AuthOutcome:
        """Exchange credentials for a token.

        Returns:
            Normalized outcome; ``NETWORK_ERROR`` when no response arrived.
        """
        try:
            response = await self._credential_call(
                "login",
                {"email": email, "password": password},
            )
        except httpx.RequestError as e:
            logger.error(
                "External auth request failed during login",
                operation="login",
                email=email,
                error=str(e),
            )
            return AuthOutcome(
                success=False,
                message=NETWORK_ERROR_MESSAGE,
                error_code=NETWORK_ERROR,
            )

        return self._credential_outcome(response, operation="login")

    async def refresh_token(self, token: str) -> AuthOutcome:
        """Trade a current token for a new one.

        Returns:
            Normalized outcome; ``REFRESH_ERROR`` when no response arrived.
        """
        headers = {**self._api_key_headers(), "Authorization": f"Bearer {token}"}
        try:
            response = await self._post_json("refresh", None, headers)
        except (httpx.RequestError, UnicodeEncodeError) as e:
            logger.error(
                "External auth token refresh failed",
                operation="refresh",
                token_id=token_fingerprint(token),
                error=str(e),
            )
            return AuthOutcome(
                success=False,
                message=REFRESH_ERROR_MESSAGE,
                error_code=REFRESH_ERROR,
            )

        return self._credential_outcome(response, operation="refresh")

    async def validate_token(self, token: str) -> AuthOutcome:
        """Ask the authentication API whether a token is still valid.

        A rejected token is a successful call: ``success=True, valid=False``.
        Only a transport failure yields ``success=False``.
        """
        if not token.isascii():
            logger.info(
                "Token rejected before validation: not sendable as a header",
                token_id=token_fingerprint(token),
            )
            return AuthOutcome(success=True, valid=False, message=INVALID_TOKEN_MESSAGE)

        try:
            response = await self._get_client().get(
                self.url_for("validate"),
                headers=self._bearer_headers(token),
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            logger.error(
                "External auth token validation failed",
                operation="validate",
                token_id=token_fingerprint(token),
                error=str(e),
            )
            return AuthOutcome(
                success=False,
                message=VALIDATION_ERROR_MESSAGE,
                error_code=VALIDATION_ERROR,
            )

        if response.is_success:
            return AuthOutcome(
                success=True,
                valid=True,
                user_data=_parse_body(response).get("user"),
            )

        logger.info(
            "Token rejected by external auth API",
            token_id=token_fingerprint(token),
            status_code=response.status_code,
        )
        return AuthOutcome(success=True, valid=False, message=INVALID_TOKEN_MESSAGE)

    async def logout(self, token: str) -> AuthOutcome:
        """Revoke a token on the authentication API.

        Unlike the other operations, failures carry no ``error_code``.
        """
        try:
            response = await self._post_json(
                "logout", None, self._bearer_headers(token)
            )
        except (httpx.RequestError, UnicodeEncodeError) as e:
            logger.error(
                "External auth logout failed",
                operation="logout",
                token_id=token_fingerprint(token),
                error=str(e),
            )
            return AuthOutcome(success=False, message=LOGOUT_ERROR_MESSAGE)

        ok = response.is_success
        return AuthOutcome(
            success=ok,
            message=LOGOUT_OK_MESSAGE if ok else LOGOUT_FAILED_MESSAGE,
        )

    @staticmethod
    def _credential_outcome(response: httpx.Response, *, operation: str) -> AuthOutcome:
        body = _parse_body(response)
        if response.is_success:
            return normalize_success(body, operation=operation)
        return normalize_error(response.status_code, body, operation=operation)
