"""Authentication state for a client.

Database tokens are used as-is on every request. Email/password credentials
are exchanged once for a JWT via ``POST /api/user/token-auth/``; until that
has happened, authenticated requests fail fast with ``AuthError``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from baserow_client.config import ApiKeyAuth, ClientConfig, CredentialsAuth
from baserow_client.errors import AuthError, BaserowError, TransportError
from baserow_client.schemas import Session

if TYPE_CHECKING:
    from baserow_client.transport import BaserowTransport

logger = logging.getLogger(__name__)

TOKEN_AUTH_PATH = "/api/user/token-auth/"


class AuthState:
    """Holds the configured credentials and the current session."""

    def __init__(self, config: ClientConfig) -> None:
        self._auth = config.auth
        self._session: Session | None = None

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._auth, ApiKeyAuth) or self._session is not None

    def authorization_header(self) -> str:
        """Value of the Authorization header for the next request.

        Raises:
            AuthError: Credentials are configured but no session exists yet.
        """
        if isinstance(self._auth, ApiKeyAuth):
            return f"Token {self._auth.api_key.get_secret_value()}"
        if self._session is None:
            raise AuthError("Not authenticated. Call authenticate() before making requests.")
        return f"JWT {self._session.token}"

    async def login(self, transport: BaserowTransport) -> Session | None:
        """Exchange email/password for a session.

        Returns None without any request when a database token is configured.

        Raises:
            AuthError: Baserow rejected the credentials.
            TransportError: The login request itself failed.
        """
        if not isinstance(self._auth, CredentialsAuth):
            logger.debug("Database token configured; skipping token auth")
            return None

        payload = {
            "email": self._auth.email,
            "password": self._auth.password.get_secret_value(),
        }
        try:
            body = await transport.request(
                "POST", TOKEN_AUTH_PATH, json=payload, authenticated=False
            )
        except TransportError:
            raise
        except BaserowError as e:
            raise AuthError(
                f"Authentication failed for {self._auth.email}: {e.message}",
                status_code=e.status_code,
                body=e.body,
            ) from e

        if not isinstance(body, dict):
            raise AuthError("Unexpected token-auth response", body=body)
        try:
            session = Session(
                token=body.get("access_token") or body["token"],
                refresh_token=body.get("refresh_token"),
                user=body.get("user"),
            )
        except (KeyError, PydanticValidationError) as e:
            raise AuthError("Token-auth response did not contain a token", body=body) from e

        self._session = session
        logger.info(f"Authenticated as {self._auth.email}")
        return session

    def clear(self) -> None:
        self._session = None
