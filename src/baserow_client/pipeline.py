"""Row Query Pipeline - builds row requests and decodes their responses.

Every method takes the mapping mode and catalog explicitly; the pipeline
holds no per-table state. Keys are translated before the request is sent,
so a translation error never results in a partial request.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from baserow_client.errors import TransportError
from baserow_client.filters import QuerySpec
from baserow_client.mapper import FieldCatalog, FieldMapper, MappingMode
from baserow_client.schemas import PagedResult, Row
from baserow_client.transport import BaserowTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")


def rows_path(table_id: int) -> str:
    return f"/api/database/rows/table/{table_id}/"


def row_path(table_id: int, row_id: int) -> str:
    return f"/api/database/rows/table/{table_id}/{row_id}/"


def _mode_params(mode: MappingMode) -> list[tuple[str, str]]:
    if mode is MappingMode.USER_FIELD_NAMES:
        return [("user_field_names", "true")]
    return []


def _expect_row(body: Any, what: str) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise TransportError(f"Unexpected {what} payload from Baserow", body=body)
    return body


class RowPipeline:
    """Row CRUD against the Baserow rows endpoints."""

    def __init__(self, transport: BaserowTransport) -> None:
        self._transport = transport

    async def _fetch_page(
        self,
        table_id: int,
        query: QuerySpec,
        mode: MappingMode,
        catalog: FieldCatalog | None,
    ) -> tuple[dict[str, Any], list[Row]]:
        params = query.to_query_params(mode, catalog)
        logger.debug(f"Listing rows of table {table_id} (page {query.page}, size {query.size})")
        body = await self._transport.request("GET", rows_path(table_id), params=params)
        envelope = _expect_row(body, "row list")
        results = envelope.get("results")
        if not isinstance(results, list) or "count" not in envelope:
            raise TransportError("Row list payload is missing 'count' or 'results'", body=body)
        rows = [FieldMapper.to_display_row(mode, catalog, raw) for raw in results]
        return envelope, rows

    async def list(
        self,
        table_id: int,
        query: QuerySpec,
        mode: MappingMode,
        catalog: FieldCatalog | None = None,
    ) -> PagedResult[Row]:
        envelope, rows = await self._fetch_page(table_id, query, mode, catalog)
        return PagedResult[Row](
            count=envelope["count"],
            next=envelope.get("next"),
            previous=envelope.get("previous"),
            results=rows,
        )

    async def list_typed(
        self,
        table_id: int,
        query: QuerySpec,
        mode: MappingMode,
        catalog: FieldCatalog | None,
        record_type: type[T],
    ) -> PagedResult[T]:
        """List one page and decode every row into ``record_type``.

        The page is decoded atomically: the first row that fails raises
        ``DeserializationError`` carrying its index and nothing is returned.
        """
        envelope, rows = await self._fetch_page(table_id, query, mode, catalog)
        records = [
            FieldMapper.deserialize_row(record_type, row, index=i) for i, row in enumerate(rows)
        ]
        return PagedResult[record_type].model_construct(  # type: ignore[valid-type]
            count=envelope["count"],
            next=envelope.get("next"),
            previous=envelope.get("previous"),
            results=records,
        )

    async def get_one(
        self,
        table_id: int,
        row_id: int,
        mode: MappingMode,
        catalog: FieldCatalog | None = None,
    ) -> Row:
        logger.debug(f"Fetching row {row_id} of table {table_id}")
        body = await self._transport.request(
            "GET", row_path(table_id, row_id), params=_mode_params(mode)
        )
        return FieldMapper.to_display_row(mode, catalog, _expect_row(body, "row"))

    async def get_one_typed(
        self,
        table_id: int,
        row_id: int,
        mode: MappingMode,
        catalog: FieldCatalog | None,
        record_type: type[T],
    ) -> T:
        row = await self.get_one(table_id, row_id, mode, catalog)
        return FieldMapper.deserialize_row(record_type, row)

    async def create_one(
        self,
        table_id: int,
        row: Mapping[str, Any],
        mode: MappingMode,
        catalog: FieldCatalog | None = None,
    ) -> Row:
        body = FieldMapper.to_api_row(mode, catalog, row)
        logger.debug(f"Creating row in table {table_id} with {len(body)} fields")
        created = await self._transport.request(
            "POST", rows_path(table_id), params=_mode_params(mode), json=body
        )
        return FieldMapper.to_display_row(mode, catalog, _expect_row(created, "created row"))

    async def update(
        self,
        table_id: int,
        row_id: int,
        row: Mapping[str, Any],
        mode: MappingMode,
        catalog: FieldCatalog | None = None,
    ) -> Row:
        """Patch the given fields of a row; omitted fields are left untouched."""
        body = FieldMapper.to_api_row(mode, catalog, row)
        logger.debug(f"Updating row {row_id} of table {table_id} ({len(body)} fields)")
        updated = await self._transport.request(
            "PATCH", row_path(table_id, row_id), params=_mode_params(mode), json=body
        )
        return FieldMapper.to_display_row(mode, catalog, _expect_row(updated, "updated row"))

    async def delete(self, table_id: int, row_id: int) -> None:
        logger.debug(f"Deleting row {row_id} of table {table_id}")
        await self._transport.request("DELETE", row_path(table_id, row_id))
