"""
Shared fixtures for baserow_client tests.

``FakeBaserow`` is an in-memory stand-in for a Baserow server, served to
the client through ``httpx.MockTransport``. It records every request so
tests can assert on what actually went over the wire.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from baserow_client import BaserowClient, ClientConfig

BASE_URL = "https://baserow.test"

FIELDS = [
    {"id": 1, "table_id": 42, "name": "Name", "order": 0, "type": "text", "primary": True},
    {"id": 2, "table_id": 42, "name": "Email", "order": 1, "type": "email", "primary": False},
    {"id": 77, "table_id": 42, "name": "age", "order": 2, "type": "number", "primary": False},
]

Route = httpx.Response | Callable[[httpx.Request], httpx.Response]


class FakeBaserow:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Route]] = {}
        self.latency = 0.0

    def add(self, method: str, path: str, *responses: Route) -> None:
        """Register responses for a route; they are served in order, the last one repeats."""
        self._routes[(method, path)] = list(responses)

    def add_json(self, method: str, path: str, body: Any, status: int = 200) -> None:
        self.add(method, path, httpx.Response(status, json=body))

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        if self.latency:
            await asyncio.sleep(self.latency)
        routes = self._routes.get((request.method, request.url.path))
        if not routes:
            return httpx.Response(404, json={"error": "ERROR_NOT_FOUND", "detail": "No route"})
        route = routes.pop(0) if len(routes) > 1 else routes[0]
        return route(request) if callable(route) else route


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


@pytest.fixture
def fake() -> FakeBaserow:
    server = FakeBaserow()
    server.add_json("GET", "/api/database/fields/table/42/", FIELDS)
    return server


@pytest.fixture
def make_client(fake: FakeBaserow) -> Callable[[ClientConfig], BaserowClient]:
    """Factory fixture building clients that talk to ``fake``."""

    def _make(config: ClientConfig | None = None) -> BaserowClient:
        config = config or ClientConfig.with_api_key("test-token", base_url=BASE_URL)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handle))
        return BaserowClient(config, http_client=http_client)

    return _make


@pytest.fixture
def client(make_client) -> BaserowClient:
    return make_client()
