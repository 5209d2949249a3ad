"""Startup setup for Edge Gateway Service."""

from __future__ import annotations

from dishka import AsyncContainer, Provider, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from services.edge_gateway_service.app.di import EdgeGatewayProvider
from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.logging_utils import (
    configure_service_logging,
    create_service_logger,
)

logger = create_service_logger("edge_gateway_service.startup")


def setup_logging(config: Settings) -> None:
    """Configure structlog for the process from service settings."""
    configure_service_logging(
        config.SERVICE_NAME,
        environment=config.ENVIRONMENT.value,
        log_level=config.LOG_LEVEL,
    )


def create_di_container(*providers: Provider) -> AsyncContainer:
    """Create and configure the DI container.

    Args:
        providers: Overrides for the production provider (used by tests)
    """
    try:
        logger.info("Creating DI container...")
        container = make_async_container(
            *(providers or (EdgeGatewayProvider(),)),
            FastapiProvider(),
        )
        logger.info("DI container created successfully")
        return container
    except Exception as e:
        logger.critical(f"Failed to create DI container: {e}", exc_info=True)
        raise


def setup_dependency_injection(app: FastAPI, container: AsyncContainer) -> None:
    """Setup Dishka integration with FastAPI."""
    try:
        logger.info("Setting up dependency injection...")
        setup_dishka(container, app)
        logger.info("Dependency injection setup completed")
    except Exception as e:
        logger.critical(f"Failed to setup dependency injection: {e}", exc_info=True)
        raise
