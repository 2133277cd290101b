"""BaserowClient - entry point of the library.

Example:
    config = ClientConfig.with_api_key("your-database-token")

    async with BaserowClient(config) as client:
        table = client.table_by_id(1234).auto_map()
        created = await table.create_one({"Name": "Ada", "Age": 36})
        adults = await (
            table.query()
            .filter_by("Age", FilterOperator.HIGHER_THAN, 18)
            .order_by("Name")
            .get()
        )
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO

import httpx
from pydantic import ValidationError as PydanticValidationError

from baserow_client.auth import AuthState
from baserow_client.config import ClientConfig
from baserow_client.errors import TransportError
from baserow_client.mapper import FieldMapper
from baserow_client.pipeline import RowPipeline
from baserow_client.schemas import FieldDescriptor, Session, UploadedFile
from baserow_client.table import TableHandle
from baserow_client.transport import BaserowTransport

logger = logging.getLogger(__name__)

UPLOAD_FILE_PATH = "/api/user-files/upload-file/"
UPLOAD_VIA_URL_PATH = "/api/user-files/upload-via-url/"


def _parse_uploaded_file(body: object) -> UploadedFile:
    try:
        return UploadedFile.model_validate(body)
    except PydanticValidationError as e:
        raise TransportError("Unexpected file upload response from Baserow", body=body) from e


class BaserowClient:
    """Async client for one Baserow instance.

    The client owns the auth state and the HTTP connection; table handles
    it hands out share both. Close it with ``aclose()`` or use it as an
    async context manager.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._auth = AuthState(config)
        self._transport = BaserowTransport(config, self._auth, http_client)
        self._mapper = FieldMapper(self._transport)
        self._pipeline = RowPipeline(self._transport)

    @classmethod
    def from_env(cls, *, http_client: httpx.AsyncClient | None = None) -> BaserowClient:
        return cls(ClientConfig.from_env(), http_client=http_client)

    async def __aenter__(self) -> BaserowClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def session(self) -> Session | None:
        return self._auth.session

    async def authenticate(self) -> Session | None:
        """Log in with the configured email/password.

        A no-op returning None when the client uses a database token.

        Raises:
            AuthError: The credentials were rejected.
        """
        return await self._auth.login(self._transport)

    def table_by_id(self, table_id: int) -> TableHandle:
        """Get a handle for a table. Performs no I/O."""
        return TableHandle(table_id, self._mapper, self._pipeline)

    table = table_by_id

    async def table_fields(self, table_id: int) -> list[FieldDescriptor]:
        """Fetch the field descriptors of a table.

        Raises:
            SchemaFetchError: The fields could not be fetched.
        """
        catalog = await self._mapper.load(table_id)
        return list(catalog.fields)

    async def upload_file(
        self,
        file: str | Path | bytes | BinaryIO,
        filename: str | None = None,
    ) -> UploadedFile:
        """Upload a file as a multipart ``file`` part.

        ``file`` may be a path, raw bytes or a binary file object. The MIME
        type is guessed from ``filename`` (or the path's name).
        """
        if isinstance(file, (str, Path)):
            path = Path(file)
            filename = filename or path.name
            content: bytes | BinaryIO = await asyncio.to_thread(path.read_bytes)
        else:
            content = file
            filename = filename or getattr(file, "name", None) or "upload"
            filename = Path(str(filename)).name

        logger.debug(f"Uploading {filename}")
        body = await self._transport.request(
            "POST", UPLOAD_FILE_PATH, files={"file": (filename, content)}
        )
        return _parse_uploaded_file(body)

    async def upload_file_via_url(self, url: str) -> UploadedFile:
        """Let Baserow download and store the file at ``url``.

        Raises:
            ValueError: ``url`` is not an absolute http(s) URL.
        """
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid file URL: {url}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValueError(f"Invalid file URL: {url}")

        body = await self._transport.request("POST", UPLOAD_VIA_URL_PATH, json={"url": str(parsed)})
        return _parse_uploaded_file(body)
