"""Exception hierarchy for the Baserow client.

Every failure raised by the library derives from ``BaserowError``. Server-side
failures keep the HTTP status and the decoded response body so callers can
inspect what Baserow actually said.
"""

from __future__ import annotations

from typing import Any


class BaserowError(Exception):
    """Base class for all client errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class AuthError(BaserowError):
    """Missing or rejected credentials/token (HTTP 401/403 or no session)."""


class SchemaFetchError(BaserowError):
    """The field catalog of a table could not be fetched."""


class UnknownFieldError(BaserowError):
    """A field name or key is not present in the table's field catalog."""

    def __init__(self, field_key: str, table_id: int | None = None) -> None:
        where = f" in table {table_id}" if table_id is not None else ""
        super().__init__(f"Unknown field '{field_key}'{where}")
        self.field_key = field_key
        self.table_id = table_id


class ModeConflictError(BaserowError):
    """Name mapping and user field names were both requested on one handle."""


class NotFoundError(BaserowError):
    """The table or row does not exist (HTTP 404)."""


class ValidationError(BaserowError):
    """Baserow rejected the request body (HTTP 400/422).

    ``field_errors`` maps each rejected field key to its messages.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
        field_errors: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, body=body)
        self.field_errors = field_errors or {}


class DeserializationError(BaserowError):
    """A row could not be converted into the requested record type."""

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        row: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.index = index
        self.row = row


class TransportError(BaserowError):
    """Network failure, timeout, undecodable body or unexpected HTTP status."""
