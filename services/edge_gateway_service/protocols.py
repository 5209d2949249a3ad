"""
Protocols for Edge Gateway Service.

Interfaces the Gateway depends on; concrete implementations are wired
by the Dishka providers in app/di.py.
"""

from __future__ import annotations

from typing import Protocol

import httpx
from prometheus_client import Counter, Histogram

from services.edge_gateway_service.models import OutboundRequest


class UpstreamClientProtocol(Protocol):
    """Protocol for the client performing the outbound upstream call."""

    async def send(self, outbound: OutboundRequest) -> httpx.Response:
        """Send the request and return the upstream response, whatever its status.

        Raises:
            UpstreamTransportError: If no response could be obtained
        """
        ...


class ErrorLogProtocol(Protocol):
    """Protocol for the append-only error log collaborator."""

    async def record(self, context: str, message: str) -> None:
        """Record one line without blocking the event loop. Must not raise."""
        ...


class MetricsProtocol(Protocol):
    """Protocol for metrics collection matching GatewayMetrics."""

    @property
    def requests_total(self) -> Counter:
        """Requests handled, by method, route and status."""
        ...

    @property
    def upstream_calls_total(self) -> Counter:
        """Upstream calls, by method and upstream status code."""
        ...

    @property
    def upstream_call_duration_seconds(self) -> Histogram:
        """Upstream call duration histogram."""
        ...

    @property
    def upstream_errors_total(self) -> Counter:
        """Upstream transport failures and non-2xx answers."""
        ...
