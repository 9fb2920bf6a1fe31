"""Shared test fixtures for salon-gateway."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config, load_config
from core.request_types import UpstreamTarget

TOKEN = "patTESTtoken1234567890"
BASE = "appBASE123"
AIRTABLE_API = "https://api.airtable.com/v0"
SERVICES_HOOK = "https://hook.eu1.make.com/abcdefghijklmnop"


def make_config(**env: str) -> Config:
    values = {"AIRTABLE_TOKEN": TOKEN, "AIRTABLE_BASE": BASE}
    values.update(env)
    return load_config(environ=values, env_file=None)


class RecordingUpstream:
    """Stub upstream that records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: Any = {"records": []}
        self.error: Exception | None = None

    def reply(self, status_code: int, payload: Any) -> None:
        self.status_code = status_code
        self.payload = payload

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, str):
            return httpx.Response(self.status_code, text=self.payload)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


class RecordingLogger:
    """RequestLogger that keeps events in memory."""

    def __init__(self) -> None:
        self.incoming: list[tuple[str, str]] = []
        self.forwarded: list[tuple[str, UpstreamTarget]] = []
        self.responses: list[tuple[str, int]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_incoming(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: Any,
    ) -> None:
        self.incoming.append((method, path))

    def log_forward(self, route: str, target: UpstreamTarget) -> None:
        self.forwarded.append((route, target))

    def log_response(self, route: str, status: int, entry: Any = None) -> None:
        self.responses.append((route, status))

    def log_error(self, route: str, status: int, message: str, entry: Any = None) -> None:
        self.errors.append((route, status, message))


@pytest.fixture
def config() -> Config:
    return make_config(MAKE_WEBHOOK_RESERVATION=SERVICES_HOOK)


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest.fixture
def request_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def client_factory(
    upstream: RecordingUpstream,
    request_logger: RecordingLogger,
) -> Iterator[Callable[[Config], TestClient]]:
    """Build TestClients (lifespan running) against the recording upstream."""
    clients: list[TestClient] = []

    def _create(config: Config) -> TestClient:
        app = create_app(config, request_logger, transport=upstream.transport)
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _create
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(client_factory: Callable[[Config], TestClient], config: Config) -> TestClient:
    return client_factory(config)
