"""Health and metrics routes for Edge Gateway Service."""

from __future__ import annotations

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.core.catalog import CatalogStore
from services.edge_gateway_service.logging_utils import create_service_logger

router = APIRouter(tags=["Health"])
logger = create_service_logger("edge_gateway_service.routers.health")


@router.get("/healthz")
@inject
async def health_check(
    config: FromDishka[Settings],
    catalog: FromDishka[CatalogStore],
) -> dict[str, str | dict]:
    """Health check endpoint.

    The service stays healthy when the catalog fell back to its error
    document; that state is reported under checks.
    """
    checks = {"service_responsive": True, "catalog_loaded": catalog.loaded}
    dependencies = {
        "upstream": {
            "status": "unknown",
            "host": config.UPSTREAM_HOST,
            "note": "Upstream availability checked on request",
        },
    }
    return {
        "service": config.SERVICE_NAME,
        "status": "healthy",
        "message": "Edge Gateway Service is healthy",
        "version": "1.0.0",
        "checks": checks,
        "dependencies": dependencies,
        "environment": config.ENVIRONMENT.value,
    }


@router.get("/metrics", response_class=PlainTextResponse)
@inject
async def metrics(registry: FromDishka[CollectorRegistry]):
    """Prometheus metrics endpoint."""
    try:
        metrics_data = generate_latest(registry)
        return PlainTextResponse(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return PlainTextResponse(content="Error generating metrics", status_code=500)
