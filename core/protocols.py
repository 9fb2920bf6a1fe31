"""Shared protocol definitions."""

from typing import Any, Protocol

from core.request_types import UpstreamTarget


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard or console).

    ``log_forward`` may return a handle for the forwarded request; it is
    passed back as ``entry`` when that same request completes.
    """

    def log_incoming(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: Any,
    ) -> None: ...
    def log_forward(self, route: str, target: UpstreamTarget) -> Any: ...
    def log_response(self, route: str, status: int, entry: Any = None) -> None: ...
    def log_error(self, route: str, status: int, message: str, entry: Any = None) -> None: ...
