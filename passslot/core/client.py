"""
Core HTTP client for the PassSlot API.

Handles authentication, request encoding, response decoding and error
classification. Every resource operation goes through `APIClient.call`.
"""

import json
import logging
import os
import ssl
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from passslot import __version__
from passslot.core.types import FieldError

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://api.passslot.com/v1"
DEFAULT_TIMEOUT = 60.0
USER_AGENT = f"PassSlotSDK-Python/{__version__}"
ACCEPT = "application/json, */*; q=0.01"

# Optional trust store shipped next to the package
BUNDLED_CA_FILE = Path(__file__).resolve().parent.parent / "cacert.pem"

UNAUTHORIZED_MESSAGE = (
    "Unauthorized. Please check your app key and make sure it has access to the template and pass type id"
)
VALIDATION_FAILED_MESSAGE = "Validation Failed"

METHODS = ("GET", "POST", "PUT", "DELETE")

# A decoded response: parsed JSON (object, array or scalar) or the raw body
DecodedResponse = Any


class PassSlotError(Exception):
    """Base error class for PassSlot errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(PassSlotError):
    """API error with status code and message."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def __str__(self) -> str:
        return f"[{self.status}]: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class UnauthorizedError(APIError):
    """The app key is invalid or has no access to the template or pass type."""

    def __init__(self) -> None:
        super().__init__(UNAUTHORIZED_MESSAGE, status=401)


class ValidationFailedError(APIError):
    """The API rejected the submitted values (HTTP 422)."""

    def __init__(self, message: str, errors: list[FieldError] | None = None):
        self.errors = errors or []
        details = {"errors": [e.to_dict() for e in self.errors]} if self.errors else None
        super().__init__(message, status=422, details=details)

    @classmethod
    def from_body(cls, body: str) -> "ValidationFailedError":
        """Build the combined "<message>; <field>: <reason>, ..." error from a 422 body."""
        try:
            data = json.loads(body)
        except ValueError:
            return cls(VALIDATION_FAILED_MESSAGE)
        if not isinstance(data, dict):
            return cls(VALIDATION_FAILED_MESSAGE)

        message = str(data.get("message") or VALIDATION_FAILED_MESSAGE)
        errors = [FieldError.from_dict(e) for e in data.get("errors") or [] if isinstance(e, dict)]
        for error in errors:
            message += f"; {error.field}: {', '.join(error.reasons)}"
        return cls(message, errors)


class TransportError(PassSlotError):
    """Connectivity failure (connection, TLS, timeout) before any HTTP status was received."""


class ValidationError(PassSlotError):
    """Validation error for local input/data issues (not API errors)."""


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration. Safe to share between threads."""

    app_key: str
    base_url: str = DEFAULT_BASE_URL
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT
    ca_bundle: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.app_key:
            raise ValidationError("App key required. Set PASSSLOT_APP_KEY or pass app_key")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(
        cls,
        app_key: str | None = None,
        base_url: str | None = None,
        debug: bool | None = None,
        timeout: float | None = None,
        ca_bundle: str | None = None,
    ) -> "ClientConfig":
        """
        Build a config from explicit values, falling back to environment variables.

        Args:
            app_key: PassSlot app key (or PASSSLOT_APP_KEY env var)
            base_url: API base URL (or PASSSLOT_BASE_URL env var)
            debug: Log every request at INFO level (or PASSSLOT_DEBUG env var)
            timeout: Request timeout in seconds (or PASSSLOT_TIMEOUT env var)
            ca_bundle: CA bundle used for TLS verification (or PASSSLOT_CA_BUNDLE env var)

        """
        env_timeout = os.environ.get("PASSSLOT_TIMEOUT")
        if not timeout and env_timeout:
            try:
                timeout = float(env_timeout)
            except ValueError as e:
                raise ValidationError(
                    "PASSSLOT_TIMEOUT must be a number", details={"PASSSLOT_TIMEOUT": env_timeout}
                ) from e
        return cls(
            app_key=app_key or os.environ.get("PASSSLOT_APP_KEY", ""),
            base_url=base_url or os.environ.get("PASSSLOT_BASE_URL", DEFAULT_BASE_URL),
            debug=_env_flag("PASSSLOT_DEBUG") if debug is None else debug,
            timeout=timeout or DEFAULT_TIMEOUT,
            ca_bundle=ca_bundle or os.environ.get("PASSSLOT_CA_BUNDLE"),
        )


class APIClient:
    """
    Low-level HTTP client for the PassSlot API.

    Handles:
    - HTTP Basic authentication with the app key
    - JSON and multipart request bodies
    - Error classification (401, 422, other non-2xx, transport failures)
    - Response decoding (JSON or raw bytes)
    """

    def __init__(self, config: ClientConfig, transport: httpx.BaseTransport | None = None):
        """
        Initialize the API client.

        Args:
            config: Client configuration
            transport: Optional httpx transport (tests use httpx.MockTransport)

        """
        self.config = config
        self._transport = transport

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        return f"{self.config.base_url}{path}"

    def _verify(self) -> ssl.SSLContext | bool:
        """Pick the trust store: configured bundle, bundled cacert.pem, or the default one."""
        ca_file = self.config.ca_bundle
        if ca_file and not Path(ca_file).is_file():
            raise ValidationError(f"CA bundle not found: {ca_file}", details={"ca_bundle": ca_file})
        if not ca_file and BUNDLED_CA_FILE.is_file():
            ca_file = str(BUNDLED_CA_FILE)
        if not ca_file:
            return True
        try:
            return ssl.create_default_context(cafile=ca_file)
        except OSError as e:
            raise ValidationError(f"Cannot load CA bundle {ca_file}: {e}", details={"ca_bundle": ca_file}) from e

    def _http_client(self) -> httpx.Client:
        return httpx.Client(
            auth=(self.config.app_key, ""),
            headers={"Accept": ACCEPT, "User-Agent": USER_AGENT},
            timeout=self.config.timeout,
            follow_redirects=False,
            verify=self._verify(),
            transport=self._transport,
        )

    def call(
        self,
        method: str,
        path: str,
        body: Any = None,
        multipart: bool = False,
    ) -> DecodedResponse:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Resource path (e.g., /templates/123/pass)
            body: JSON-compatible body, or a mapping of httpx file tuples when multipart
            multipart: Send the body as multipart/form-data

        Returns:
            Parsed JSON for application/json responses, raw bytes otherwise

        Raises:
            UnauthorizedError: On HTTP 401
            ValidationFailedError: On HTTP 422
            APIError: On any other non-2xx status
            TransportError: When no HTTP response was received

        """
        method = method.upper()
        if method not in METHODS:
            raise ValidationError(f"Unsupported HTTP method: {method}")

        url = self._build_url(path)
        kwargs: dict[str, Any] = {}
        if method in ("POST", "PUT"):
            if multipart:
                kwargs["files"] = body or {}
            else:
                kwargs["content"] = json.dumps({} if body is None else body).encode("utf-8")
                kwargs["headers"] = {"Content-Type": "application/json"}

        level = logging.INFO if self.config.debug else logging.DEBUG
        logger.log(level, "%s %s%s", method, url, " (multipart)" if multipart else "")

        try:
            with self._http_client() as client:
                response = client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out after {self.config.timeout} seconds") from e
        except httpx.TransportError as e:
            raise TransportError(f"Connection error: {e}") from e

        logger.log(level, "%s %s -> %s", method, url, response.status_code)
        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> DecodedResponse:
        """Classify the response by status and decode a successful body."""
        status = response.status_code

        if status == 422:
            raise ValidationFailedError.from_body(response.text)

        if status == 401:
            raise UnauthorizedError()

        if status < 200 or status >= 300:
            raw = response.text
            message = raw
            try:
                data = json.loads(raw)
            except ValueError:
                data = None
            if isinstance(data, dict) and data.get("message") is not None:
                message = str(data["message"])
            raise APIError(message, status=status)

        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json") and response.content:
            try:
                return response.json()
            except ValueError as e:
                raise APIError(f"Invalid JSON response: {e}", status=status) from e
        return response.content

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str) -> DecodedResponse:
        """Make a GET request."""
        return self.call("GET", path)

    def post(self, path: str, body: Any = None, multipart: bool = False) -> DecodedResponse:
        """Make a POST request."""
        return self.call("POST", path, body, multipart)

    def put(self, path: str, body: Any = None, multipart: bool = False) -> DecodedResponse:
        """Make a PUT request."""
        return self.call("PUT", path, body, multipart)

    def delete(self, path: str) -> DecodedResponse:
        """Make a DELETE request."""
        return self.call("DELETE", path)
