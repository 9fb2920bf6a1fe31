"""Forwarding orchestration for gateway routes."""

from typing import Any

from core.config import Config
from core.exceptions import GatewayError
from core.protocols import RequestLogger
from core.request_types import Failed, ForwardResult, Forwarded, InboundRequest, Route
from core.routes import TargetBuilder
from services.upstream import UpstreamClient


class ForwardingService:
    """Validate, build, send and normalize one request into a ForwardResult."""

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        upstream: UpstreamClient,
        builder: TargetBuilder | None = None,
    ) -> None:
        self._config = config
        self._logger = logger
        self._upstream = upstream
        self._builder = builder or TargetBuilder(config)

    async def forward(self, request: InboundRequest) -> ForwardResult:
        """Forward a request; never raises."""
        route = request.route
        entry = None
        try:
            target = self._builder.build(request)
            entry = self._logger.log_forward(route.value, target)
            status, body = await self._upstream.send(target, route.provider)
        except GatewayError as e:
            self._logger.log_error(route.value, e.status_code, _describe(e), entry)
            return Failed(e)
        except Exception as e:
            self._logger.log_error(route.value, 500, f"{type(e).__name__}: {e}", entry)
            return Failed(GatewayError("Internal gateway error"))

        self._logger.log_response(route.value, status, entry)
        return Forwarded(self._shape(route, body), upstream_status=status)

    def _shape(self, route: Route, body: Any) -> Any:
        """Create/Update return a single record unless the full envelope is configured."""
        if route not in (Route.CREATE, Route.UPDATE):
            return body
        if self._config.gateway.record_response == "envelope":
            return body
        if isinstance(body, dict) and isinstance(body.get("records"), list):
            records = body["records"]
            return records[0] if records else body
        return body


def _describe(error: GatewayError) -> str:
    if error.details:
        return f"{error.message} ({error.details})"
    return error.message
