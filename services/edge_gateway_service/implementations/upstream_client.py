"""Upstream HTTP client implementation for Edge Gateway service.

Wraps a shared httpx.AsyncClient and converts transport failures into
UpstreamTransportError. Non-2xx answers are returned, not raised.
"""

from __future__ import annotations

import httpx

from services.edge_gateway_service.exceptions import UpstreamTransportError
from services.edge_gateway_service.models import OutboundRequest
from services.edge_gateway_service.protocols import UpstreamClientProtocol


def encode_header_values(headers: dict[str, str]) -> dict[str, bytes]:
    """Encode header values back to the latin-1 bytes they arrived as.

    ASGI servers decode inbound header bytes as latin-1, so a caller value
    such as b"t\\xe9" reaches the gateway as "té" and must leave as the same
    bytes. httpx would otherwise encode str values as ASCII.

    Raises:
        UnicodeEncodeError: If a value holds characters outside latin-1
    """
    return {name: value.encode("latin-1") for name, value in headers.items()}


class HttpxUpstreamClient(UpstreamClientProtocol):
    """Upstream client backed by httpx."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the upstream client.

        Args:
            client: The underlying httpx AsyncClient to use
        """
        self._client = client

    async def send(self, outbound: OutboundRequest) -> httpx.Response:
        """Send the outbound request.

        Args:
            outbound: Fully built request for the upstream host

        Returns:
            Raw httpx Response object with the body already read

        Raises:
            UpstreamTransportError: On connect, DNS, TLS, timeout, protocol or redirect
                failure, or when a header value cannot be put on the wire
        """
        try:
            return await self._client.request(
                outbound.method,
                outbound.url,
                headers=encode_header_values(outbound.headers),
                content=outbound.body.encode("utf-8") if outbound.body is not None else None,
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            raise UpstreamTransportError(outbound.url, e) from e
