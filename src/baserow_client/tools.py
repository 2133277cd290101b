"""
Baserow MCP tools - structured data backend for agent workflows.

Supports:
- Database Tokens (BASEROW_TOKEN)
- Custom base URLs for self-hosted instances (BASEROW_URL)
- Human-readable field names (user_field_names=true)

API Reference: https://baserow.io/api-docs
"""

from __future__ import annotations

import os
from typing import Any, Protocol

from fastmcp import FastMCP

from baserow_client.client import BaserowClient
from baserow_client.config import ClientConfig
from baserow_client.errors import BaserowError
from baserow_client.filters import FilterOperator, OrderDirection, QuerySpec

MAX_PAGE_SIZE = 200


class CredentialSource(Protocol):
    def get(self, key: str) -> str | None: ...


def _parse_order_by(order_by: str | None) -> list[tuple[str, OrderDirection]]:
    """Parse ``"Name,-Age"`` into sort clauses."""
    clauses = []
    for part in (order_by or "").split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("-"):
            clauses.append((part[1:], OrderDirection.DESC))
        else:
            clauses.append((part.lstrip("+"), OrderDirection.ASC))
    return clauses


def _build_query(
    page: int,
    limit: int,
    search: str | None,
    order_by: str | None,
    filters: list[dict[str, Any]] | None,
) -> QuerySpec:
    spec = QuerySpec(page=page, size=min(limit, MAX_PAGE_SIZE)).with_search(search)
    for field_key, direction in _parse_order_by(order_by):
        spec = spec.order_by(field_key, direction)
    for item in filters or []:
        spec = spec.filter_by(item["field"], FilterOperator(item["operator"]), item.get("value", ""))
    return spec


def register_tools(
    mcp: FastMCP,
    credentials: CredentialSource | None = None,
) -> None:
    """Register Baserow tools with the MCP server."""

    def _get_credentials() -> tuple[str | None, str | None]:
        """Get Baserow credentials from store or environment."""
        if credentials is not None:
            token = credentials.get("baserow")
            url = credentials.get("baserow_url")
            return token, url
        return os.getenv("BASEROW_TOKEN"), os.getenv("BASEROW_URL")

    def _get_client() -> BaserowClient | dict[str, str]:
        """Get initialized Baserow client or error."""
        token, url = _get_credentials()
        if not token:
            return {
                "error": "Baserow token not configured",
                "help": "Set BASEROW_TOKEN environment variable or configure via credential store.",
            }
        return BaserowClient(ClientConfig.with_api_key(token, base_url=url))

    @mcp.tool()
    async def baserow_list_rows(
        table_id: int,
        search: str | None = None,
        order_by: str | None = None,
        filters: list[dict[str, Any]] | None = None,
        page: int = 1,
        limit: int = 100,
    ) -> dict[str, Any]:
        """
        List rows from a Baserow table.

        Args:
            table_id: The ID of the Baserow table.
            search: Optional search term to filter rows.
            order_by: Optional comma-separated field names to sort by
                      (prefix with - for descending).
            filters: Optional list of {"field", "operator", "value"} conditions,
                     combined with AND. Operators are Baserow filter types
                     such as "equal", "contains" or "higher_than".
            page: Page number, starting at 1.
            limit: Maximum number of rows to return (default 100, max 200).

        Returns:
            A dictionary containing the rows and pagination metadata.
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        try:
            query = _build_query(page, limit, search, order_by, filters)
        except (KeyError, ValueError) as e:
            return {"error": f"Invalid query: {e}"}
        async with client:
            try:
                result = await client.table_by_id(table_id).user_field_names().list_rows(query)
            except BaserowError as e:
                return {"error": f"Baserow API error: {e}"}
        return result.model_dump()

    @mcp.tool()
    async def baserow_get_row(table_id: int, row_id: int) -> dict[str, Any]:
        """
        Get a specific row from a Baserow table.

        Args:
            table_id: The ID of the Baserow table.
            row_id: The ID of the row to retrieve.

        Returns:
            The row data including field values.
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        async with client:
            try:
                return await client.table_by_id(table_id).user_field_names().get_one(row_id)
            except BaserowError as e:
                return {"error": f"Baserow API error: {e}"}

    @mcp.tool()
    async def baserow_create_row(table_id: int, data: dict[str, Any]) -> dict[str, Any]:
        """
        Create a new row in a Baserow table.

        Args:
            table_id: The ID of the Baserow table.
            data: A dictionary mapping field names to their values.
                  Example: {"Name": "New Lead", "Status": "Draft"}

        Returns:
            The created row data.
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        async with client:
            try:
                return await client.table_by_id(table_id).user_field_names().create_one(data)
            except BaserowError as e:
                return {"error": f"Baserow API error: {e}"}

    @mcp.tool()
    async def baserow_update_row(table_id: int, row_id: int, data: dict[str, Any]) -> dict[str, Any]:
        """
        Update an existing row in a Baserow table.

        Args:
            table_id: The ID of the Baserow table.
            row_id: The ID of the row to update.
            data: A dictionary of fields to update.

        Returns:
            The updated row data.
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        async with client:
            try:
                return await client.table_by_id(table_id).user_field_names().update(row_id, data)
            except BaserowError as e:
                return {"error": f"Baserow API error: {e}"}

    @mcp.tool()
    async def baserow_delete_row(table_id: int, row_id: int) -> dict[str, Any]:
        """
        Delete a row from a Baserow table.

        Args:
            table_id: The ID of the Baserow table.
            row_id: The ID of the row to delete.

        Returns:
            A success indicator.
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        async with client:
            try:
                await client.table_by_id(table_id).delete(row_id)
            except BaserowError as e:
                return {"error": f"Baserow API error: {e}"}
        return {"success": True}

    @mcp.tool()
    async def baserow_list_fields(table_id: int) -> dict[str, Any]:
        """
        List the fields (columns) of a Baserow table.

        Args:
            table_id: The ID of the Baserow table.

        Returns:
            A dictionary with a "fields" list of id, name, type and primary flag.
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        async with client:
            try:
                fields = await client.table_fields(table_id)
            except BaserowError as e:
                return {"error": f"Baserow API error: {e}"}
        return {
            "fields": [
                {"id": f.id, "name": f.name, "type": f.field_type, "primary": f.primary}
                for f in fields
            ]
        }
