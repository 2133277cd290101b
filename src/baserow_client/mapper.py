"""Field Mapper - translation between field keys, field names and records.

A row can be keyed three ways:

- raw API keys (``field_4711``), what Baserow returns by default
- human field names (``Name``), what callers usually want
- a caller-defined record type, validated from the named row

The mapper is the single point of translation: outgoing keys (filters,
sort, create/update bodies) go through ``to_api_key``/``to_api_row`` and
incoming rows through ``to_display_row`` before anything else sees them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from baserow_client.errors import (
    AuthError,
    BaserowError,
    DeserializationError,
    SchemaFetchError,
    UnknownFieldError,
)
from baserow_client.schemas import FieldDescriptor, Row

if TYPE_CHECKING:
    from baserow_client.transport import BaserowTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")

RAW_KEY_PATTERN = re.compile(r"^field_(\d+)$")

# Keys Baserow puts on every row that are not table fields.
ROW_METADATA_KEYS = frozenset({"id", "order"})


class MappingMode(StrEnum):
    """Which row-key representation a table handle uses on the wire."""

    UNMAPPED = "unmapped"
    MAPPED_BY_NAME = "mapped_by_name"
    USER_FIELD_NAMES = "user_field_names"


def parse_raw_key(key: str) -> int | None:
    """Return the field id of a ``field_<id>`` key, else None."""
    match = RAW_KEY_PATTERN.match(key)
    return int(match.group(1)) if match else None


@lru_cache(maxsize=128)
def type_adapter(record_type: Any) -> TypeAdapter[Any]:
    """Validator for a record type, built once per type."""
    return TypeAdapter(record_type)


class FieldCatalog:
    """Immutable, bidirectional id <-> name index of a table's fields."""

    def __init__(self, fields: Iterable[FieldDescriptor]) -> None:
        self._fields: tuple[FieldDescriptor, ...] = tuple(fields)
        self._by_id: dict[int, FieldDescriptor] = {}
        self._by_name: dict[str, FieldDescriptor] = {}

        for descriptor in self._fields:
            if descriptor.id in self._by_id:
                raise ValueError(f"Duplicate field id {descriptor.id}")
            if descriptor.name in self._by_name:
                raise ValueError(f"Duplicate field name '{descriptor.name}'")
            self._by_id[descriptor.id] = descriptor
            self._by_name[descriptor.name] = descriptor

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        return self._fields

    @property
    def primary_field(self) -> FieldDescriptor | None:
        return next((f for f in self._fields if f.primary), None)

    def get_by_id(self, field_id: int) -> FieldDescriptor | None:
        return self._by_id.get(field_id)

    def get_by_name(self, name: str) -> FieldDescriptor | None:
        return self._by_name.get(name)

    def field_id(self, name: str) -> int | None:
        descriptor = self._by_name.get(name)
        return descriptor.id if descriptor else None

    def field_name(self, field_id: int) -> str | None:
        descriptor = self._by_id.get(field_id)
        return descriptor.name if descriptor else None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldCatalog({len(self._fields)} fields)"


class FieldMapper:
    """Loads field catalogs and translates rows between representations."""

    def __init__(self, transport: BaserowTransport) -> None:
        self._transport = transport

    async def load(self, table_id: int) -> FieldCatalog:
        """Fetch all field descriptors of a table.

        Raises:
            AuthError: Credentials are configured but not yet exchanged for a
                session; no request is sent.
            SchemaFetchError: On any transport/auth failure, a missing table,
                or a payload that is not a list of field descriptors.
        """
        logger.debug(f"Fetching field catalog for table {table_id}")
        try:
            payload = await self._transport.request(
                "GET", f"/api/database/fields/table/{table_id}/"
            )
        except BaserowError as e:
            # Missing session: nothing was sent.
            if isinstance(e, AuthError) and e.status_code is None:
                raise
            raise SchemaFetchError(
                f"Failed to fetch fields for table {table_id}: {e.message}",
                status_code=e.status_code,
                body=e.body,
            ) from e

        if not isinstance(payload, list):
            raise SchemaFetchError(
                f"Unexpected field list payload for table {table_id}", body=payload
            )
        try:
            catalog = FieldCatalog(FieldDescriptor.model_validate(item) for item in payload)
        except (PydanticValidationError, ValueError) as e:
            raise SchemaFetchError(
                f"Invalid field catalog for table {table_id}: {e}", body=payload
            ) from e

        logger.info(f"Loaded {len(catalog)} fields for table {table_id}")
        return catalog

    @staticmethod
    def to_api_key(mode: MappingMode, catalog: FieldCatalog | None, user_key: str) -> str:
        """Translate a caller-supplied field key into the key sent to Baserow.

        Raises:
            UnknownFieldError: In UNMAPPED mode, when the key is not a
                ``field_<id>`` key. In MAPPED_BY_NAME mode, when the key is
                neither a known field name nor a ``field_<id>`` key of a known field.
            SchemaFetchError: In MAPPED_BY_NAME mode without a loaded catalog.
        """
        if mode is MappingMode.USER_FIELD_NAMES:
            return user_key
        if mode is MappingMode.UNMAPPED:
            if parse_raw_key(user_key) is None:
                raise UnknownFieldError(user_key)
            return user_key
        if catalog is None:
            raise SchemaFetchError("Field catalog is not loaded")

        field_id = catalog.field_id(user_key)
        if field_id is not None:
            return f"field_{field_id}"

        raw_id = parse_raw_key(user_key)
        if raw_id is not None and catalog.get_by_id(raw_id) is not None:
            return user_key

        raise UnknownFieldError(user_key)

    @classmethod
    def to_api_row(
        cls,
        mode: MappingMode,
        catalog: FieldCatalog | None,
        row: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Translate every key of an outgoing row body.

        Raises:
            UnknownFieldError: See ``to_api_key``.
            ValueError: Two keys resolve to the same field.
        """
        out: dict[str, Any] = {}
        for key, value in row.items():
            api_key = key if key in ROW_METADATA_KEYS else cls.to_api_key(mode, catalog, key)
            if api_key in out:
                raise ValueError(f"Field '{key}' resolves to '{api_key}', which is already set")
            out[api_key] = value
        return out

    @staticmethod
    def to_display_row(
        mode: MappingMode,
        catalog: FieldCatalog | None,
        raw_row: Mapping[str, Any],
    ) -> Row:
        """Rewrite ``field_<id>`` keys of a response row to field names."""
        if mode is not MappingMode.MAPPED_BY_NAME or catalog is None:
            return dict(raw_row)

        out: Row = {}
        for key, value in raw_row.items():
            raw_id = parse_raw_key(key)
            name = catalog.field_name(raw_id) if raw_id is not None else None
            if raw_id is not None and name is None:
                logger.warning(f"Row key '{key}' is not in the field catalog; keeping raw key")
            out[name or key] = value
        return out

    @staticmethod
    def deserialize_row(record_type: type[T], row: Mapping[str, Any], index: int | None = None) -> T:
        """Validate a (mapped) row into ``record_type``.

        Any type pydantic can validate works: BaseModel subclasses,
        dataclasses, TypedDicts, ``dict[str, Any]``.

        Raises:
            DeserializationError: The row does not fit ``record_type``.
        """
        try:
            return type_adapter(record_type).validate_python(dict(row))
        except PydanticValidationError as e:
            where = f"row {index}" if index is not None else "row"
            raise DeserializationError(
                f"Could not decode {where} into {getattr(record_type, '__name__', record_type)}: {e}",
                index=index,
                row=dict(row),
            ) from e
