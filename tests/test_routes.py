"""Tests for route contracts and upstream target construction."""

from __future__ import annotations

from typing import Any

import pytest

from core.exceptions import MissingParameters, UnknownWebhook
from core.request_types import InboundRequest, Route
from core.routes import REQUIRED_FIELDS, TargetBuilder, require_fields
from tests.conftest import BASE, SERVICES_HOOK, TOKEN, make_config

VALID_BODIES: dict[Route, dict[str, Any]] = {
    Route.QUERY: {"table": "Clients", "filterByFormula": "{Nom} = 'Jean'"},
    Route.CREATE: {"table": "Clients", "fields": {"Name": "Jean"}},
    Route.UPDATE: {"table": "Clients", "recordId": "rec123", "fields": {"Name": "Jean"}},
    Route.WEBHOOK_PROXY: {"webhookName": "services", "payload": {"date": "2026-10-17"}},
}


@pytest.fixture
def builder() -> TargetBuilder:
    return TargetBuilder(make_config(MAKE_WEBHOOK_SERVICES=SERVICES_HOOK))


class TestRequireFields:
    @pytest.mark.parametrize(
        ("route", "field"),
        [(route, name) for route, fields in REQUIRED_FIELDS.items() for name, _ in fields],
    )
    def test_each_missing_field_is_rejected(self, route: Route, field: str) -> None:
        body = dict(VALID_BODIES[route])
        del body[field]
        with pytest.raises(MissingParameters) as exc_info:
            require_fields(route, body)
        assert field in exc_info.value.message
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("value", [None, "", 42, ["Clients"]])
    def test_empty_or_mistyped_table_counts_as_missing(self, value: Any) -> None:
        with pytest.raises(MissingParameters):
            require_fields(Route.CREATE, {"table": value, "fields": {"Name": "Jean"}})

    def test_fields_must_be_an_object(self) -> None:
        with pytest.raises(MissingParameters):
            require_fields(Route.CREATE, {"table": "Clients", "fields": "Name=Jean"})

    def test_empty_fields_object_is_present(self) -> None:
        require_fields(Route.CREATE, {"table": "Clients", "fields": {}})

    def test_message_lists_required_fields(self) -> None:
        with pytest.raises(MissingParameters) as exc_info:
            require_fields(Route.UPDATE, {})
        assert exc_info.value.message == (
            "Missing parameters: table, recordId and fields required"
        )
        assert exc_info.value.to_body() == {"error": exc_info.value.message}


class TestTargetBuilder:
    def test_query_target(self, builder: TargetBuilder) -> None:
        target = builder.build(InboundRequest(Route.QUERY, VALID_BODIES[Route.QUERY]))
        assert target.method == "GET"
        assert target.url == f"https://api.airtable.com/v0/{BASE}/Clients"
        assert target.params == {"filterByFormula": "{Nom} = 'Jean'"}
        assert target.headers["Authorization"] == f"Bearer {TOKEN}"
        assert target.body is None

    def test_query_forwards_known_options_only(self, builder: TargetBuilder) -> None:
        body = {
            **VALID_BODIES[Route.QUERY],
            "view": "Grid view",
            "pageSize": 50,
            "offset": "itrABC/recXYZ",
            "maxRecords": True,
            "sort": [{"field": "Nom"}],
        }
        target = builder.build(InboundRequest(Route.QUERY, body))
        assert target.params == {
            "filterByFormula": "{Nom} = 'Jean'",
            "view": "Grid view",
            "pageSize": 50,
            "offset": "itrABC/recXYZ",
        }

    def test_table_name_is_percent_encoded(self, builder: TargetBuilder) -> None:
        body = {"table": "Rendez-vous/Été (2026)", "filterByFormula": "TRUE()"}
        target = builder.build(InboundRequest(Route.QUERY, body))
        assert target.url == (
            f"https://api.airtable.com/v0/{BASE}/Rendez-vous%2F%C3%89t%C3%A9%20(2026)"
        )

    def test_create_target(self, builder: TargetBuilder) -> None:
        target = builder.build(InboundRequest(Route.CREATE, VALID_BODIES[Route.CREATE]))
        assert target.method == "POST"
        assert target.url == f"https://api.airtable.com/v0/{BASE}/Clients"
        assert target.body == {"records": [{"fields": {"Name": "Jean"}}]}

    def test_update_target_keeps_record_id_as_is(self, builder: TargetBuilder) -> None:
        target = builder.build(InboundRequest(Route.UPDATE, VALID_BODIES[Route.UPDATE]))
        assert target.method == "PATCH"
        assert target.url.endswith("/Clients/rec123")
        assert target.body == {"fields": {"Name": "Jean"}}

    def test_webhook_target_has_no_auth_header(self, builder: TargetBuilder) -> None:
        target = builder.build(
            InboundRequest(Route.WEBHOOK_PROXY, VALID_BODIES[Route.WEBHOOK_PROXY])
        )
        assert target.method == "POST"
        assert target.url == SERVICES_HOOK
        assert target.body == {"date": "2026-10-17"}
        assert "Authorization" not in target.headers

    def test_unknown_webhook(self, builder: TargetBuilder) -> None:
        body = {"webhookName": "Factures", "payload": {}}
        with pytest.raises(UnknownWebhook) as exc_info:
            builder.build(InboundRequest(Route.WEBHOOK_PROXY, body))
        assert exc_info.value.config_key == "MAKE_WEBHOOK_FACTURES"
        assert "MAKE_WEBHOOK_FACTURES" in exc_info.value.message
        assert exc_info.value.status_code == 400

    def test_custom_api_url(self) -> None:
        builder = TargetBuilder(make_config(AIRTABLE_API_URL="http://airtable.local/v0/"))
        target = builder.build(InboundRequest(Route.CREATE, VALID_BODIES[Route.CREATE]))
        assert target.url == f"http://airtable.local/v0/{BASE}/Clients"
