"""Metrics definitions for the Edge Gateway Service."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


class GatewayMetrics:
    """A container for all Prometheus metrics for the Edge Gateway Service."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics with optional registry for test isolation."""
        if registry is None:
            registry = REGISTRY
        self.requests_total = Counter(
            "edge_gateway_requests_total",
            "Total number of requests handled by the Edge Gateway.",
            ["method", "route", "http_status"],
            registry=registry,
        )
        self.upstream_calls_total = Counter(
            "edge_gateway_upstream_calls_total",
            "Total number of calls forwarded to the upstream host.",
            ["method", "status_code"],
            registry=registry,
        )
        self.upstream_call_duration_seconds = Histogram(
            "edge_gateway_upstream_call_duration_seconds",
            "Duration of upstream calls in seconds.",
            ["method"],
            registry=registry,
        )
        self.upstream_errors_total = Counter(
            "edge_gateway_upstream_errors_total",
            "Total number of upstream non-2xx answers and transport failures.",
            ["error_type"],
            registry=registry,
        )
