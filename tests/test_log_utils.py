"""Tests for request log files and secret masking."""

from __future__ import annotations

import json
from pathlib import Path

from core.request_types import UpstreamTarget
from ui.log_utils import clear_logs, mask, mask_url, write_incoming_log, write_upstream_log


def test_mask() -> None:
    assert mask("short") == "***"
    assert mask("patABCDEFGHIJKLMNOP") == "patABC...MNOP"


def test_mask_url_hides_webhook_path() -> None:
    masked = mask_url("https://hook.eu1.make.com/abcdefghijklmnop")
    assert masked == "https://hook.eu1.make.com/abcdef...mnop"


def test_incoming_log_redacts_authorization(tmp_path: Path) -> None:
    path = write_incoming_log(
        "POST",
        "/api/airtable/query",
        {"authorization": "Bearer secret-token-value", "content-type": "application/json"},
        {"table": "Clients"},
        log_root=tmp_path,
    )
    entry = json.loads(path.read_text())
    assert path.parent == tmp_path / "incoming"
    assert entry["headers"]["authorization"] == "Bearer...alue"
    assert entry["headers"]["content-type"] == "application/json"
    assert entry["body"] == {"table": "Clients"}


def test_upstream_log_masks_token_and_webhook_url(tmp_path: Path) -> None:
    airtable = UpstreamTarget(
        method="GET",
        url="https://api.airtable.com/v0/appBASE/Clients",
        headers={"Authorization": "Bearer patSECRET1234567890"},
        params={"filterByFormula": "TRUE()"},
    )
    webhook = UpstreamTarget(
        method="POST",
        url="https://hook.eu1.make.com/abcdefghijklmnop",
        body={"a": 1},
    )

    airtable_log = write_upstream_log("query", airtable, log_root=tmp_path)
    webhook_log = write_upstream_log("webhook", webhook, log_root=tmp_path)
    airtable_entry = json.loads(airtable_log.read_text())
    webhook_entry = json.loads(webhook_log.read_text())

    assert "patSECRET1234567890" not in json.dumps(airtable_entry)
    assert airtable_entry["url"] == "https://api.airtable.com/v0/appBASE/Clients"
    assert airtable_entry["params"] == {"filterByFormula": "TRUE()"}
    assert webhook_entry["url"] == "https://hook.eu1.make.com/abcdef...mnop"
    assert webhook_entry["body"] == {"a": 1}


def test_clear_logs(tmp_path: Path) -> None:
    write_incoming_log("POST", "/", {}, {}, log_root=tmp_path)
    write_incoming_log("POST", "/", {}, {}, log_root=tmp_path)
    assert clear_logs(tmp_path) == 2
    assert list((tmp_path / "incoming").glob("*.json")) == []
    assert clear_logs(tmp_path / "absent") == 0
