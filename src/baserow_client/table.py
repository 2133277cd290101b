"""Table Handle - the per-table CRUD surface.

Getting a handle is free; the first operation that needs the field catalog
loads it. Catalog loading is single-flight: concurrent first callers on the
same handle share one fetch and observe the same catalog (or the same error).

Mapping modes:
    UNMAPPED          keys go out and come back as ``field_<id>``
    MAPPED_BY_NAME    names are translated locally using the catalog
    USER_FIELD_NAMES  names are sent as-is with ``user_field_names=true``

The two non-default modes are mutually exclusive on a handle.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from baserow_client.errors import ModeConflictError
from baserow_client.filters import FilterOperator, OrderDirection, QuerySpec
from baserow_client.mapper import FieldCatalog, FieldMapper, MappingMode
from baserow_client.pipeline import RowPipeline
from baserow_client.schemas import FieldDescriptor, PagedResult, Row

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TableHandle:
    """Operations on one Baserow table.

    A handle is meant to be used by one logical caller at a time. Use
    ``clone()`` to give another caller its own handle and catalog cache.
    """

    def __init__(
        self,
        table_id: int,
        mapper: FieldMapper,
        pipeline: RowPipeline,
        mode: MappingMode = MappingMode.UNMAPPED,
        catalog: FieldCatalog | None = None,
    ) -> None:
        self.table_id = table_id
        self._mapper = mapper
        self._pipeline = pipeline
        self._mode = mode
        self._catalog = catalog
        self._catalog_load: asyncio.Future[FieldCatalog] | None = None

    def __repr__(self) -> str:
        return f"TableHandle(table_id={self.table_id}, mode={self._mode.value})"

    @property
    def mode(self) -> MappingMode:
        return self._mode

    @property
    def catalog(self) -> FieldCatalog | None:
        """The loaded field catalog, or None if it has not been fetched."""
        return self._catalog

    # --- Mapping mode ---

    def _set_mode(self, mode: MappingMode) -> TableHandle:
        if self._mode is mode:
            return self
        if self._mode is not MappingMode.UNMAPPED:
            raise ModeConflictError(
                f"Table {self.table_id} already uses {self._mode.value}; "
                f"{mode.value} cannot be enabled on the same handle"
            )
        self._mode = mode
        logger.debug(f"Table {self.table_id} switched to {mode.value}")
        return self

    def auto_map(self) -> TableHandle:
        """Translate field names locally via the table's field catalog.

        The catalog is fetched lazily by the first operation that needs it.

        Raises:
            ModeConflictError: ``user_field_names()`` is already active.
        """
        return self._set_mode(MappingMode.MAPPED_BY_NAME)

    def user_field_names(self) -> TableHandle:
        """Let Baserow accept and return field names directly.

        Raises:
            ModeConflictError: ``auto_map()`` is already active.
        """
        return self._set_mode(MappingMode.USER_FIELD_NAMES)

    def clone(self) -> TableHandle:
        """A new handle with the same mode and catalog, but its own load cell."""
        return TableHandle(
            self.table_id,
            self._mapper,
            self._pipeline,
            mode=self._mode,
            catalog=self._catalog,
        )

    # --- Field catalog ---

    async def _load_catalog(self) -> FieldCatalog:
        try:
            catalog = await self._mapper.load(self.table_id)
        except BaseException:
            self._catalog_load = None
            raise
        self._catalog = catalog
        self._catalog_load = None
        return catalog

    async def load_fields(self) -> FieldCatalog:
        """Return the field catalog, fetching it once if needed.

        Raises:
            SchemaFetchError: The catalog could not be fetched.
        """
        if self._catalog is not None:
            return self._catalog
        if self._catalog_load is None:
            self._catalog_load = asyncio.ensure_future(self._load_catalog())
        return await asyncio.shield(self._catalog_load)

    async def refresh_fields(self) -> FieldCatalog:
        """Fetch the catalog again and replace the cached one wholesale."""
        if self._catalog_load is not None:
            await asyncio.shield(self._catalog_load)
        self._catalog = None
        return await self.load_fields()

    async def fields(self) -> list[FieldDescriptor]:
        catalog = await self.load_fields()
        return list(catalog.fields)

    async def _resolve(self) -> FieldCatalog | None:
        if self._mode is MappingMode.MAPPED_BY_NAME:
            return await self.load_fields()
        return self._catalog

    # --- Rows ---

    def query(self) -> RowQuery:
        return RowQuery(self)

    async def list_rows(self, query: QuerySpec | None = None) -> PagedResult[Row]:
        catalog = await self._resolve()
        return await self._pipeline.list(self.table_id, query or QuerySpec(), self._mode, catalog)

    async def list_typed(self, record_type: type[T], query: QuerySpec | None = None) -> PagedResult[T]:
        catalog = await self._resolve()
        return await self._pipeline.list_typed(
            self.table_id, query or QuerySpec(), self._mode, catalog, record_type
        )

    async def get_one(self, row_id: int) -> Row:
        catalog = await self._resolve()
        return await self._pipeline.get_one(self.table_id, row_id, self._mode, catalog)

    async def get_one_typed(self, row_id: int, record_type: type[T]) -> T:
        catalog = await self._resolve()
        return await self._pipeline.get_one_typed(
            self.table_id, row_id, self._mode, catalog, record_type
        )

    async def create_one(self, row: Mapping[str, Any]) -> Row:
        catalog = await self._resolve()
        return await self._pipeline.create_one(self.table_id, row, self._mode, catalog)

    async def update(self, row_id: int, row: Mapping[str, Any]) -> Row:
        catalog = await self._resolve()
        return await self._pipeline.update(self.table_id, row_id, row, self._mode, catalog)

    async def delete(self, row_id: int) -> None:
        await self._pipeline.delete(self.table_id, row_id)


class RowQuery:
    """Immutable query builder bound to a table handle.

    Every builder call returns a new ``RowQuery``; nothing is sent until
    ``get()`` or ``get_typed()`` is awaited.

        page = await (
            table.query()
            .filter_by("Age", FilterOperator.HIGHER_THAN, 18)
            .order_by("Name")
            .size(10)
            .get()
        )
    """

    def __init__(self, table: TableHandle, spec: QuerySpec | None = None) -> None:
        self._table = table
        self._spec = spec or QuerySpec()

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    def _with(self, spec: QuerySpec) -> RowQuery:
        return RowQuery(self._table, spec)

    def filter_by(self, field_key: str, operator: FilterOperator | str, value: object = "") -> RowQuery:
        return self._with(self._spec.filter_by(field_key, operator, value))

    def order_by(self, field_key: str, direction: OrderDirection | str = OrderDirection.ASC) -> RowQuery:
        return self._with(self._spec.order_by(field_key, direction))

    def page(self, page: int) -> RowQuery:
        return self._with(self._spec.with_page(page))

    def size(self, size: int) -> RowQuery:
        return self._with(self._spec.with_size(size))

    def view(self, view_id: int) -> RowQuery:
        return self._with(self._spec.with_view(view_id))

    def search(self, term: str) -> RowQuery:
        return self._with(self._spec.with_search(term))

    async def get(self) -> PagedResult[Row]:
        return await self._table.list_rows(self._spec)

    async def get_typed(self, record_type: type[T]) -> PagedResult[T]:
        return await self._table.list_typed(record_type, self._spec)
