"""Custom exception hierarchy for the forwarding gateway."""

from typing import Any


class GatewayError(Exception):
    """Base exception for all gateway errors.

    Every request-level error knows the HTTP status it maps to and the JSON
    body the caller receives.
    """

    status_code: int = 500

    def __init__(self, message: str, details: Any = "") -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details}


class ConfigurationError(GatewayError):
    """Raised when configuration is missing or invalid."""


class MissingParameters(GatewayError):
    """Inbound body lacks a required field for the chosen route."""

    status_code = 400

    def __init__(self, fields: tuple[str, ...]) -> None:
        super().__init__(f"Missing parameters: {_join(fields)} required")
        self.fields = fields

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


class UnknownWebhook(GatewayError):
    """Requested webhook name has no configured target URL."""

    status_code = 400

    def __init__(self, config_key: str) -> None:
        super().__init__(f"Webhook not found: {config_key}. Check the environment settings.")
        self.config_key = config_key

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


class UpstreamError(GatewayError):
    """Raised when an upstream API returns a non-success status.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (500 when unknown)
        details: Upstream-specific error message or body
        provider: Upstream name (e.g., 'airtable', 'make')
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = "",
        provider: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code or 500
        self.provider = provider


class TransportError(GatewayError):
    """Network-level failure reaching the upstream."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider


class UpstreamTimeoutError(TransportError):
    """Raised when an upstream request times out."""


class UpstreamConnectionError(TransportError):
    """Raised when unable to connect to an upstream."""


class RequestTooLarge(GatewayError):
    """Request body exceeds size limit."""

    status_code = 413

    def __init__(self) -> None:
        super().__init__("Request body too large")

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidJSON(GatewayError):
    """Request body is not a valid JSON object."""

    status_code = 400

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


def _join(fields: tuple[str, ...]) -> str:
    if len(fields) == 1:
        return fields[0]
    return ", ".join(fields[:-1]) + f" and {fields[-1]}"
