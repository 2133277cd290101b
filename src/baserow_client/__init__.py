"""Typed async client for the Baserow REST API.

- BaserowClient: authentication, table handles, file uploads
- TableHandle / RowQuery: row CRUD, filtering, sorting, pagination
- FieldMapper / FieldCatalog: translation between field ids and names
"""

from baserow_client.client import BaserowClient
from baserow_client.config import ApiKeyAuth, ClientConfig, CredentialsAuth
from baserow_client.errors import (
    AuthError,
    BaserowError,
    DeserializationError,
    ModeConflictError,
    NotFoundError,
    SchemaFetchError,
    TransportError,
    UnknownFieldError,
    ValidationError,
)
from baserow_client.filters import (
    FilterClause,
    FilterOperator,
    OrderDirection,
    QuerySpec,
    SortClause,
)
from baserow_client.mapper import FieldCatalog, FieldMapper, MappingMode
from baserow_client.schemas import (
    FieldDescriptor,
    PagedResult,
    Row,
    Session,
    Thumbnail,
    UploadedFile,
    User,
)
from baserow_client.table import RowQuery, TableHandle

__all__ = [
    "ApiKeyAuth",
    "AuthError",
    "BaserowClient",
    "BaserowError",
    "ClientConfig",
    "CredentialsAuth",
    "DeserializationError",
    "FieldCatalog",
    "FieldDescriptor",
    "FieldMapper",
    "FilterClause",
    "FilterOperator",
    "MappingMode",
    "ModeConflictError",
    "NotFoundError",
    "OrderDirection",
    "PagedResult",
    "QuerySpec",
    "Row",
    "RowQuery",
    "SchemaFetchError",
    "Session",
    "SortClause",
    "TableHandle",
    "Thumbnail",
    "TransportError",
    "UnknownFieldError",
    "UploadedFile",
    "User",
    "ValidationError",
]
