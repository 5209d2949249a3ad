from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide
from prometheus_client import REGISTRY, CollectorRegistry

from services.edge_gateway_service.app.metrics import GatewayMetrics
from services.edge_gateway_service.config import Settings, settings
from services.edge_gateway_service.core.catalog import CatalogStore
from services.edge_gateway_service.core.error_log import FileErrorLog
from services.edge_gateway_service.core.gateway import EdgeGateway
from services.edge_gateway_service.implementations.upstream_client import HttpxUpstreamClient
from services.edge_gateway_service.protocols import (
    ErrorLogProtocol,
    MetricsProtocol,
    UpstreamClientProtocol,
)


class EdgeGatewayProvider(Provider):
    scope = Scope.APP

    @provide
    def get_config(self) -> Settings:
        return settings

    @provide
    async def provide_catalog(
        self, config: Settings, error_log: ErrorLogProtocol
    ) -> CatalogStore:
        # Read once per process; the store is never written afterwards
        return await CatalogStore.load_recorded(config.CATALOG_PATH, error_log)

    @provide
    def provide_error_log(self, config: Settings) -> ErrorLogProtocol:
        return FileErrorLog(config.ERROR_LOG_PATH)

    @provide
    async def get_http_client(self, config: Settings) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(config.HTTP_CLIENT_TIMEOUT_SECONDS),
            follow_redirects=config.HTTP_CLIENT_FOLLOW_REDIRECTS,
        ) as httpx_client:
            yield httpx_client

    @provide
    def provide_upstream_client(self, http_client: httpx.AsyncClient) -> UpstreamClientProtocol:
        return HttpxUpstreamClient(http_client)

    @provide
    def provide_registry(self) -> CollectorRegistry:
        return REGISTRY

    @provide
    def provide_metrics(self, registry: CollectorRegistry) -> MetricsProtocol:
        return GatewayMetrics(registry=registry)

    @provide
    def provide_gateway(
        self,
        config: Settings,
        catalog: CatalogStore,
        upstream_client: UpstreamClientProtocol,
        error_log: ErrorLogProtocol,
        metrics: MetricsProtocol,
    ) -> EdgeGateway:
        return EdgeGateway(
            config=config,
            catalog=catalog,
            upstream_client=upstream_client,
            error_log=error_log,
            metrics=metrics,
        )
