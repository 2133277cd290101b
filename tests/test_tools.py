"""Tests for the Baserow MCP tools."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from baserow_client.client import BaserowClient
from baserow_client.filters import FilterOperator, OrderDirection
from baserow_client.tools import MAX_PAGE_SIZE, _build_query, _parse_order_by, register_tools

ROWS_PATH = "/api/database/rows/table/123/"


def register(credentials=None) -> dict:
    mcp = MagicMock()
    registered_fns = []
    mcp.tool.return_value = lambda fn: registered_fns.append(fn) or fn
    register_tools(mcp, credentials=credentials)
    return {fn.__name__: fn for fn in registered_fns}


@pytest.fixture
def cred_store():
    store = MagicMock()
    store.get.side_effect = lambda key: "test-token" if key == "baserow" else None
    return store


@pytest.fixture
def tools(cred_store, fake):
    """Registered tools whose clients talk to the fake server."""

    def build(config):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handle))
        return BaserowClient(config, http_client=http_client)

    with patch("baserow_client.tools.BaserowClient", side_effect=build):
        yield register(cred_store)


class TestQueryHelpers:
    def test_parse_order_by(self):
        assert _parse_order_by("Name, -Age,+Email") == [
            ("Name", OrderDirection.ASC),
            ("Age", OrderDirection.DESC),
            ("Email", OrderDirection.ASC),
        ]
        assert _parse_order_by(None) == []

    def test_build_query_caps_page_size(self):
        spec = _build_query(1, 1000, None, None, None)
        assert spec.size == MAX_PAGE_SIZE

    def test_build_query_filters(self):
        spec = _build_query(2, 10, "ada", "-Name", [{"field": "Age", "operator": "higher_than", "value": 18}])
        assert spec.page == 2
        assert spec.search == "ada"
        assert spec.filters[0].operator is FilterOperator.HIGHER_THAN
        assert spec.filters[0].value == "18"
        assert spec.sort[0].direction is OrderDirection.DESC


class TestToolRegistration:
    def test_register_tools_registers_all(self):
        mcp = MagicMock()
        mcp.tool.return_value = lambda fn: fn
        register_tools(mcp)
        assert mcp.tool.call_count == 6

    @pytest.mark.asyncio
    async def test_no_credentials_returns_error(self):
        with patch.dict("os.environ", {}, clear=True):
            fns = register(credentials=None)
            result = await fns["baserow_list_rows"](table_id=1)
        assert "error" in result
        assert "token not configured" in result["error"]

    @pytest.mark.asyncio
    async def test_env_token_is_used(self, fake):
        fake.add_json("GET", ROWS_PATH, {"count": 0, "next": None, "previous": None, "results": []})

        def build(config):
            return BaserowClient(config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake.handle)))

        env = {"BASEROW_TOKEN": "env-token", "BASEROW_URL": "https://self.hosted/"}
        with patch.dict("os.environ", env, clear=True), patch(
            "baserow_client.tools.BaserowClient", side_effect=build
        ):
            fns = register(credentials=None)
            await fns["baserow_list_rows"](table_id=123)

        request = fake.calls("GET", ROWS_PATH)[0]
        assert request.headers["Authorization"] == "Token env-token"
        assert request.url.host == "self.hosted"


class TestTools:
    @pytest.mark.asyncio
    async def test_credentials_from_store(self, tools, fake):
        fake.add_json("GET", ROWS_PATH, {"count": 1, "next": None, "previous": None, "results": [{"id": 1, "Name": "Ada"}]})

        result = await tools["baserow_list_rows"](table_id=123, search="ada", order_by="-Name", limit=500)

        request = fake.calls("GET", ROWS_PATH)[0]
        assert request.headers["Authorization"] == "Token test-token"
        assert request.url.host == "api.baserow.io"
        assert request.url.params["user_field_names"] == "true"
        assert request.url.params["search"] == "ada"
        assert request.url.params["order_by"] == "-Name"
        assert request.url.params["size"] == str(MAX_PAGE_SIZE)
        assert result["count"] == 1
        assert result["results"] == [{"id": 1, "Name": "Ada"}]

    @pytest.mark.asyncio
    async def test_list_rows_invalid_operator(self, tools, fake):
        result = await tools["baserow_list_rows"](
            table_id=123, filters=[{"field": "Name", "operator": "roughly", "value": "x"}]
        )
        assert "Invalid query" in result["error"]
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_get_row_not_found(self, tools):
        result = await tools["baserow_get_row"](table_id=123, row_id=9)
        assert "error" in result
        assert "not found" in result["error"]

    @pytest.mark.asyncio
    async def test_create_row(self, tools, fake):
        fake.add_json("POST", ROWS_PATH, {"id": 7, "Name": "New"})

        result = await tools["baserow_create_row"](table_id=123, data={"Name": "New"})

        request = fake.calls("POST", ROWS_PATH)[0]
        assert request.url.params["user_field_names"] == "true"
        assert result == {"id": 7, "Name": "New"}

    @pytest.mark.asyncio
    async def test_update_row(self, tools, fake):
        fake.add_json("PATCH", f"{ROWS_PATH}7/", {"id": 7, "Name": "Renamed"})
        result = await tools["baserow_update_row"](table_id=123, row_id=7, data={"Name": "Renamed"})
        assert result["Name"] == "Renamed"

    @pytest.mark.asyncio
    async def test_delete_row(self, tools, fake):
        fake.add("DELETE", f"{ROWS_PATH}7/", httpx.Response(204))
        assert await tools["baserow_delete_row"](table_id=123, row_id=7) == {"success": True}

    @pytest.mark.asyncio
    async def test_list_fields(self, tools, fake):
        fake.add_json(
            "GET",
            "/api/database/fields/table/123/",
            [{"id": 1, "name": "Name", "type": "text", "primary": True}],
        )
        result = await tools["baserow_list_fields"](table_id=123)
        assert result == {"fields": [{"id": 1, "name": "Name", "type": "text", "primary": True}]}

    @pytest.mark.asyncio
    async def test_auth_failure_is_reported(self, tools, fake):
        fake.add("GET", ROWS_PATH, httpx.Response(401, json={"detail": "Invalid token"}))
        result = await tools["baserow_list_rows"](table_id=123)
        assert "Invalid or expired" in result["error"]


def test_build_server():
    from baserow_client.server import build_server

    assert build_server().name == "baserow"
