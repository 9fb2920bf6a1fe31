"""Route contracts: required fields and upstream target construction."""

from typing import Any
from urllib.parse import quote

from core.config import Config
from core.exceptions import MissingParameters, UnknownWebhook
from core.headers import HeaderBuilder
from core.request_types import InboundRequest, Route, UpstreamTarget

# Characters encodeURIComponent leaves alone; everything else in a table name is escaped.
_SEGMENT_SAFE = "!~*'()"

REQUIRED_FIELDS: dict[Route, tuple[tuple[str, type], ...]] = {
    Route.QUERY: (("table", str), ("filterByFormula", str)),
    Route.CREATE: (("table", str), ("fields", dict)),
    Route.UPDATE: (("table", str), ("recordId", str), ("fields", dict)),
    Route.WEBHOOK_PROXY: (("webhookName", str), ("payload", dict)),
}

# Optional list-records parameters forwarded verbatim on Query.
QUERY_OPTIONS = ("view", "maxRecords", "pageSize", "offset")

ENDPOINTS = [
    "POST /api/airtable/query (filterByFormula)",
    "POST /api/airtable/create",
    "POST /api/airtable/update",
    "POST /api/webhook/proxy",
]


def require_fields(route: Route, body: dict[str, Any]) -> None:
    """Raise MissingParameters unless every required field is present and well-typed."""
    required = REQUIRED_FIELDS[route]
    for name, expected in required:
        value = body.get(name)
        if value is None or value == "" or not isinstance(value, expected):
            raise MissingParameters(tuple(n for n, _ in required))


class TargetBuilder:
    """Turn a validated inbound request into exactly one upstream target."""

    def __init__(self, config: Config, header_builder: HeaderBuilder | None = None) -> None:
        self._config = config
        self._headers = header_builder or HeaderBuilder()

    def build(self, request: InboundRequest) -> UpstreamTarget:
        require_fields(request.route, request.body)
        body = request.body
        if request.route is Route.QUERY:
            return self._query(body)
        if request.route is Route.CREATE:
            return self._create(body)
        if request.route is Route.UPDATE:
            return self._update(body)
        return self._webhook(body)

    def table_url(self, table: str) -> str:
        airtable = self._config.airtable
        return f"{airtable.api_url}/{airtable.base_id}/{quote(table, safe=_SEGMENT_SAFE)}"

    def _query(self, body: dict[str, Any]) -> UpstreamTarget:
        params: dict[str, Any] = {"filterByFormula": body["filterByFormula"]}
        for name in QUERY_OPTIONS:
            value = body.get(name)
            if isinstance(value, (str, int)) and not isinstance(value, bool):
                params[name] = value
        return UpstreamTarget(
            method="GET",
            url=self.table_url(body["table"]),
            headers=self._airtable_headers(),
            params=params,
        )

    def _create(self, body: dict[str, Any]) -> UpstreamTarget:
        return UpstreamTarget(
            method="POST",
            url=self.table_url(body["table"]),
            headers=self._airtable_headers(),
            body={"records": [{"fields": body["fields"]}]},
        )

    def _update(self, body: dict[str, Any]) -> UpstreamTarget:
        # recordId goes into the path as given
        return UpstreamTarget(
            method="PATCH",
            url=f"{self.table_url(body['table'])}/{body['recordId']}",
            headers=self._airtable_headers(),
            body={"fields": body["fields"]},
        )

    def _webhook(self, body: dict[str, Any]) -> UpstreamTarget:
        key, url = self._config.webhooks.resolve(body["webhookName"])
        if not url:
            raise UnknownWebhook(key)
        return UpstreamTarget(
            method="POST",
            url=url,
            headers=self._headers.build_webhook_headers(),
            body=body["payload"],
        )

    def _airtable_headers(self) -> dict[str, str]:
        return self._headers.build_airtable_headers(self._config.airtable.token)
