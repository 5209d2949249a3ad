"""Edge Gateway orchestration.

Evaluates, in order: preflight, catalog, robots, proxy. Every path through
`handle()` returns exactly one GatewayResponse; upstream failures are
translated here and never propagate to the HTTP layer.
"""

from __future__ import annotations

import json
import time

from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.core.catalog import CatalogStore
from services.edge_gateway_service.core.cors import decide_cors_headers
from services.edge_gateway_service.core.outbound import (
    JSON_CONTENT_TYPE,
    build_outbound_request,
)
from services.edge_gateway_service.core.path_normalizer import PathNormalizer
from services.edge_gateway_service.core.routing import resolve_route
from services.edge_gateway_service.enums import RouteKind
from services.edge_gateway_service.exceptions import UpstreamTransportError
from services.edge_gateway_service.logging_utils import create_service_logger
from services.edge_gateway_service.models import (
    GatewayResponse,
    InboundRequest,
    OutboundRequest,
)
from services.edge_gateway_service.protocols import (
    ErrorLogProtocol,
    MetricsProtocol,
    UpstreamClientProtocol,
)

logger = create_service_logger("edge_gateway.gateway")

TRANSPORT_ERROR_MESSAGE = "Upstream connection failed"
INTERNAL_ERROR_MESSAGE = "Internal gateway error"
ERROR_BODY_PREVIEW_CHARS = 200


class EdgeGateway:
    """Routes one inbound request to its terminal outcome."""

    def __init__(
        self,
        config: Settings,
        catalog: CatalogStore,
        upstream_client: UpstreamClientProtocol,
        error_log: ErrorLogProtocol,
        metrics: MetricsProtocol | None = None,
    ) -> None:
        self._config = config
        self._catalog = catalog
        self._upstream = upstream_client
        self._error_log = error_log
        self._metrics = metrics
        self._normalizer = PathNormalizer(config.PATH_PREFIX_RULES)

    @property
    def catalog(self) -> CatalogStore:
        return self._catalog

    async def reload_catalog(self) -> CatalogStore:
        """Re-read the catalog file and serve the new document from now on."""
        if self._catalog.path is not None:
            self._catalog = await CatalogStore.load_recorded(self._catalog.path, self._error_log)
        return self._catalog

    async def handle(self, inbound: InboundRequest) -> GatewayResponse:
        cors = decide_cors_headers(
            inbound.origin, self._config.CORS_ALLOWED_ORIGINS, self._config.CORS_POLICY
        )
        paths = self._normalizer.normalize(inbound.path)
        route = resolve_route(inbound.method, paths.clean)

        if route == RouteKind.PREFLIGHT:
            response = GatewayResponse(status_code=200, headers=cors, body="")
        elif route == RouteKind.CATALOG:
            response = GatewayResponse(
                status_code=200,
                headers={**cors, "Content-Type": JSON_CONTENT_TYPE},
                body=self._catalog.render(),
            )
        elif route == RouteKind.ROBOTS:
            response = GatewayResponse(status_code=200, headers=cors, body="")
        else:
            outbound = build_outbound_request(inbound, paths.forward, self._config)
            response = await self._forward(outbound, cors)

        if self._metrics is not None:
            self._metrics.requests_total.labels(
                method=inbound.method, route=route.value, http_status=str(response.status_code)
            ).inc()
        return response

    async def _forward(self, outbound: OutboundRequest, cors: dict[str, str]) -> GatewayResponse:
        logger.info("forwarding", method=outbound.method, target_url=outbound.url)
        started = time.perf_counter()
        try:
            upstream = await self._upstream.send(outbound)
        except UpstreamTransportError as e:
            return await self._transport_failure(e, cors)
        finally:
            if self._metrics is not None:
                self._metrics.upstream_call_duration_seconds.labels(
                    method=outbound.method
                ).observe(time.perf_counter() - started)

        body = upstream.text
        if self._metrics is not None:
            self._metrics.upstream_calls_total.labels(
                method=outbound.method, status_code=str(upstream.status_code)
            ).inc()

        if not upstream.is_success:
            # Relayed unchanged; only recorded.
            logger.warning(
                "upstream answered with non-2xx status",
                status_code=upstream.status_code,
                target_url=outbound.url,
            )
            await self._error_log.record(
                f"API Error {upstream.status_code}", body[:ERROR_BODY_PREVIEW_CHARS]
            )
            if self._metrics is not None:
                self._metrics.upstream_errors_total.labels(error_type="http_status").inc()

        return GatewayResponse(
            status_code=upstream.status_code,
            headers={
                **cors,
                "Content-Type": upstream.headers.get("content-type") or JSON_CONTENT_TYPE,
            },
            body=body,
        )

    async def _transport_failure(
        self, error: UpstreamTransportError, cors: dict[str, str]
    ) -> GatewayResponse:
        logger.error(
            "upstream transport failure",
            target_url=error.url,
            error=error.message,
            error_type=type(error.cause).__name__,
        )
        await self._error_log.record("Network Error", error.message)
        if self._metrics is not None:
            self._metrics.upstream_errors_total.labels(error_type="transport").inc()

        return GatewayResponse(
            status_code=self._config.TRANSPORT_ERROR_STATUS,
            headers={**cors, "Content-Type": JSON_CONTENT_TYPE},
            body=json.dumps(
                {"error": f"{TRANSPORT_ERROR_MESSAGE}: {error.message}", "details": error.message}
            ),
        )


def internal_error_response(
    origin: str | None, config: Settings, error: Exception
) -> GatewayResponse:
    """Last-resort response for a failure that escaped request handling."""
    cors = decide_cors_headers(origin, config.CORS_ALLOWED_ORIGINS, config.CORS_POLICY)
    return GatewayResponse(
        status_code=500,
        headers={**cors, "Content-Type": JSON_CONTENT_TYPE},
        body=json.dumps(
            {"error": INTERNAL_ERROR_MESSAGE, "details": str(error) or type(error).__name__}
        ),
    )
