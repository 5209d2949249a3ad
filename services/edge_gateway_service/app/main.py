from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import Response

from services.edge_gateway_service.app.startup_setup import (
    create_di_container,
    setup_dependency_injection,
    setup_logging,
)
from services.edge_gateway_service.config import Settings, settings
from services.edge_gateway_service.core.gateway import internal_error_response
from services.edge_gateway_service.logging_utils import create_service_logger

from ..routers import proxy_routes
from ..routers.health_routes import router as health_router

logger = create_service_logger("edge_gateway_service.main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await app.state.di_container.close()
    logger.info("Edge Gateway Service shutdown completed")


def register_error_handlers(app: FastAPI, config: Settings) -> None:
    """Last-resort translation so the caller always gets one CORS-decorated JSON response."""

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
        logger.error(
            "Unhandled gateway error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            exc_info=exc,
        )
        return proxy_routes.to_http_response(
            internal_error_response(request.headers.get("origin"), config, exc)
        )


def create_app(config: Settings | None = None, container: AsyncContainer | None = None) -> FastAPI:
    config = config or settings
    app = FastAPI(
        title=config.SERVICE_NAME,
        version="1.0.0",
        description="Edge Gateway - CORS, static catalog and upstream forwarding",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    register_error_handlers(app, config)

    # Ops routes must be registered before the catch-all route
    if config.OPS_ROUTES_ENABLED:
        app.include_router(health_router, prefix=config.OPS_ROUTE_PREFIX)
    app.include_router(proxy_routes.router)

    container = container or create_di_container()
    setup_dependency_injection(app, container)

    # Store container reference for cleanup
    app.state.di_container = container

    return app


def run() -> None:
    import uvicorn

    uvicorn.run(
        "services.edge_gateway_service.app.main:app",
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )


setup_logging(settings)
app = create_app()


if __name__ == "__main__":
    run()
