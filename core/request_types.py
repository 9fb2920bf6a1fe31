"""Shared request data types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from core.exceptions import GatewayError


class Route(str, Enum):
    """The four forwarding contracts the gateway exposes."""

    QUERY = "query"
    CREATE = "create"
    UPDATE = "update"
    WEBHOOK_PROXY = "webhook"

    @property
    def provider(self) -> str:
        return "make" if self is Route.WEBHOOK_PROXY else "airtable"


@dataclass(frozen=True)
class InboundRequest:
    """JSON object body received on one route."""

    route: Route
    body: dict[str, Any]


@dataclass(frozen=True)
class UpstreamTarget:
    """Prepared data for an upstream request."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True)
class Forwarded:
    """Successful forward: the body relayed to the caller."""

    body: Any
    upstream_status: int = 200


@dataclass(frozen=True)
class Failed:
    """Failed forward, tagged by the error type."""

    error: GatewayError

    @property
    def status_code(self) -> int:
        return self.error.status_code


ForwardResult = Forwarded | Failed
