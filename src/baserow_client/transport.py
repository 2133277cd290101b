"""HTTP transport wrapping ``httpx.AsyncClient``.

Responsibilities:
- join paths onto the configured base URL
- attach the Authorization header from the auth state
- turn HTTP failures into the client's exception taxonomy
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from baserow_client.config import ClientConfig
from baserow_client.errors import (
    AuthError,
    NotFoundError,
    TransportError,
    ValidationError,
)

if TYPE_CHECKING:
    from baserow_client.auth import AuthState

logger = logging.getLogger(__name__)

USER_AGENT = "baserow-client"


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_detail(body: Any) -> str:
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        if detail:
            return detail if isinstance(detail, str) else str(detail)
    return str(body) if body else ""


def _field_errors(body: Any) -> dict[str, list[str]]:
    """Extract per-field messages from a Baserow validation error body.

    Shape::

        {"error": "ERROR_REQUEST_BODY_VALIDATION",
         "detail": {"field_12": [{"error": "Not a valid integer.", "code": "invalid"}]}}
    """
    if not isinstance(body, dict) or not isinstance(body.get("detail"), dict):
        return {}
    errors: dict[str, list[str]] = {}
    for key, items in body["detail"].items():
        if not isinstance(items, list):
            items = [items]
        errors[key] = [item.get("error", str(item)) if isinstance(item, dict) else str(item) for item in items]
    return errors


def _handle_response(response: httpx.Response) -> Any:
    """Return the decoded body of a successful response or raise."""
    status = response.status_code
    if status == 204 or (200 <= status < 300 and not response.content):
        return None
    if 200 <= status < 300:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Baserow returned invalid JSON (HTTP {status})",
                status_code=status,
                body=response.text,
            ) from e

    body = _decode_body(response)
    detail = _error_detail(body)
    if status == 401:
        raise AuthError(f"Invalid or expired Baserow token: {detail}", status_code=status, body=body)
    if status == 403:
        raise AuthError(
            f"Insufficient permissions for this Baserow resource: {detail}",
            status_code=status,
            body=body,
        )
    if status == 404:
        raise NotFoundError(
            f"Baserow resource (table or row) not found: {detail}", status_code=status, body=body
        )
    if status in (400, 422):
        raise ValidationError(
            f"Baserow rejected the request: {detail}",
            status_code=status,
            body=body,
            field_errors=_field_errors(body),
        )
    raise TransportError(f"Baserow API error (HTTP {status}): {detail}", status_code=status, body=body)


class BaserowTransport:
    """Issues requests against one Baserow instance."""

    def __init__(
        self,
        config: ClientConfig,
        auth: AuthState,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._auth = auth
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | dict[str, str] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty).

        Raises:
            AuthError: No usable credentials (raised before sending), or 401/403.
            NotFoundError: 404.
            ValidationError: 400/422.
            TransportError: Network failure, timeout, bad JSON or other status.
        """
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if authenticated:
            headers["Authorization"] = self._auth.authorization_header()

        url = self.url(path)
        logger.debug(f"{method} {url}")
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json,
                files=files,
                timeout=self._config.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Baserow API request timed out: {method} {url}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Baserow API request failed: {method} {url}: {e}") from e

        logger.debug(f"{method} {url} -> HTTP {response.status_code}")
        return _handle_response(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
