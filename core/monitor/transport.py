"""Async HTTP transport for score-host requests.

Requests are routed through a cross-origin relay (``corsproxy.io`` by default)
which forwards to the percent-encoded target URL. The relay is opaque to the
monitor: it only needs "GET an absolute URL, get back status and body".
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from core.errors import ProtocolError, SnapshotParseError, transport_error_from

logger = logging.getLogger(__name__)

# httpx logs every request URL at INFO and maintenance URLs carry the manager password
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

DEFAULT_RELAY_URL = "https://corsproxy.io/?url="
DEFAULT_TIMEOUT_SECONDS = 10.0

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def relay_url_for(target_url: str, relay_url: Optional[str]) -> str:
    """Return the URL to request so that ``target_url`` is reached via the relay."""
    if not relay_url:
        return target_url
    return f"{relay_url}{quote(target_url, safe=_URI_COMPONENT_SAFE)}"


class StatusTransport:
    """Issue GET requests to arbitrary absolute URLs through the relay."""

    def __init__(
        self,
        *,
        relay_url: Optional[str] = DEFAULT_RELAY_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            relay_url: Relay prefix the encoded target is appended to. ``None``
                or empty sends requests directly to the target.
            timeout_seconds: Per-request timeout for the lazily created client.
            client: Pre-built client (tests, shared pools). Not closed by ``close()``.
        """
        self.relay_url = relay_url or None
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def get(
        self,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """GET ``url`` via the relay.

        Raises:
            TransportError: Network failure or timeout.
            ProtocolError: Non-2xx response status.
        """
        client = await self._get_client()
        try:
            response = await client.get(relay_url_for(url, self.relay_url), headers=headers)
        except httpx.HTTPError as exc:
            raise transport_error_from(exc) from exc

        # Target URLs may carry the manager password; only the status is logged
        logger.debug("Relay responded with status %d", response.status_code)
        if not response.is_success:
            raise ProtocolError(response.status_code)
        return response

    async def get_json(
        self,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            SnapshotParseError: Body is not valid JSON.
        """
        response = await self.get(url, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise SnapshotParseError(f"Invalid JSON in response: {exc}") from exc

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
