"""Client configuration.

A configuration is a base URL plus exactly one way of authenticating:

- ``ApiKeyAuth``: a database token, sent as ``Authorization: Token <key>``
- ``CredentialsAuth``: email/password exchanged for a JWT via ``authenticate()``

Environment variables read by ``ClientConfig.from_env``:
    BASEROW_URL       base URL (defaults to https://api.baserow.io)
    BASEROW_TOKEN     database token
    BASEROW_EMAIL     login email (used when no token is set)
    BASEROW_PASSWORD  login password
    BASEROW_TIMEOUT   request timeout in seconds
"""

from __future__ import annotations

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator

DEFAULT_BASEROW_URL = "https://api.baserow.io"
DEFAULT_TIMEOUT = 30.0


class ApiKeyAuth(BaseModel):
    kind: Literal["api_key"] = "api_key"
    api_key: SecretStr


class CredentialsAuth(BaseModel):
    kind: Literal["credentials"] = "credentials"
    email: str
    password: SecretStr


class ClientConfig(BaseModel):
    """Connection settings for a ``BaserowClient``."""

    base_url: str = DEFAULT_BASEROW_URL
    auth: ApiKeyAuth | CredentialsAuth = Field(discriminator="kind")
    timeout: float = DEFAULT_TIMEOUT

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base_url must not be empty")
        return value

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @property
    def uses_credentials(self) -> bool:
        return isinstance(self.auth, CredentialsAuth)

    @classmethod
    def with_api_key(
        cls,
        api_key: str,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> ClientConfig:
        return cls(
            base_url=base_url or DEFAULT_BASEROW_URL,
            auth=ApiKeyAuth(api_key=SecretStr(api_key)),
            timeout=timeout,
        )

    @classmethod
    def with_credentials(
        cls,
        email: str,
        password: str,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> ClientConfig:
        return cls(
            base_url=base_url or DEFAULT_BASEROW_URL,
            auth=CredentialsAuth(email=email, password=SecretStr(password)),
            timeout=timeout,
        )

    @classmethod
    def from_env(cls, *, load_env_file: bool = True) -> ClientConfig:
        """Build a configuration from ``BASEROW_*`` environment variables.

        A database token wins over email/password when both are present.

        Raises:
            ValueError: If neither a token nor email and password are set.
        """
        if load_env_file:
            load_dotenv()

        base_url = os.getenv("BASEROW_URL") or DEFAULT_BASEROW_URL
        timeout = float(os.getenv("BASEROW_TIMEOUT") or DEFAULT_TIMEOUT)

        token = os.getenv("BASEROW_TOKEN")
        if token:
            return cls.with_api_key(token, base_url=base_url, timeout=timeout)

        email = os.getenv("BASEROW_EMAIL")
        password = os.getenv("BASEROW_PASSWORD")
        if email and password:
            return cls.with_credentials(email, password, base_url=base_url, timeout=timeout)

        raise ValueError(
            "Baserow credentials not configured. Set BASEROW_TOKEN, "
            "or BASEROW_EMAIL and BASEROW_PASSWORD."
        )
