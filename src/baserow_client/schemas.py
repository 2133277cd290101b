"""Pydantic schemas for Baserow API payloads.

Payload shapes:
    FieldDescriptor   GET  /api/database/fields/table/{table_id}/   (list)
    PagedResult[T]    GET  /api/database/rows/table/{table_id}/
    UploadedFile      POST /api/user-files/upload-file/ | upload-via-url/
    Session           POST /api/user/token-auth/
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue

T = TypeVar("T")

Row = dict[str, JsonValue]
"""One table row: field key -> JSON value."""


class FieldDescriptor(BaseModel):
    """Metadata for one table field.

    Type-specific extras Baserow sends (``select_options``, ``link_row_table_id``,
    ...) are kept as model extras.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: int
    name: str
    field_type: str = Field(alias="type")
    primary: bool = False
    table_id: int | None = None
    order: int | None = None
    read_only: bool = False
    description: str | None = None

    @property
    def api_key(self) -> str:
        """The raw row key Baserow uses for this field."""
        return f"field_{self.id}"


class PagedResult(BaseModel, Generic[T]):
    """One page of a row listing.

    ``count`` is the number of matching rows across all pages, not the
    length of ``results``.
    """

    count: int
    next: str | None = None
    previous: str | None = None
    results: list[T] = Field(default_factory=list)

    @property
    def has_next(self) -> bool:
        return self.next is not None

    @property
    def has_previous(self) -> bool:
        return self.previous is not None


class Thumbnail(BaseModel):
    url: str
    width: int | None = None
    height: int | None = None


class UploadedFile(BaseModel):
    """File reference returned by the user-files endpoints.

    ``image_width``/``image_height`` are null or missing for non-image files.
    """

    url: str
    thumbnails: dict[str, Thumbnail] | None = None
    name: str
    size: int
    mime_type: str
    is_image: bool = False
    image_width: int | None = None
    image_height: int | None = None
    uploaded_at: datetime | None = None
    original_name: str | None = None


class User(BaseModel):
    first_name: str = ""
    username: str = ""
    language: str = ""


class Session(BaseModel):
    """Result of a successful credential login."""

    token: str
    refresh_token: str | None = None
    user: User | None = None
