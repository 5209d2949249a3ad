"""Custom exception classes for Edge Gateway Service."""

from __future__ import annotations

from pathlib import Path

from services.edge_gateway_service.enums import GatewayErrorCode


class EdgeGatewayError(Exception):
    """Base exception for Edge Gateway Service errors."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or GatewayErrorCode.INTERNAL_ERROR.value


class CatalogLoadError(EdgeGatewayError):
    """Raised when the catalog file is missing, unreadable or not valid JSON."""

    def __init__(self, path: Path, reason: str) -> None:
        message = f"Catalog load failed for {path}: {reason}"
        super().__init__(message, GatewayErrorCode.CATALOG_LOAD_ERROR.value)
        self.path = path
        self.reason = reason


class UpstreamTransportError(EdgeGatewayError):
    """Raised when the upstream host cannot be reached (DNS, TLS, connect, timeout)."""

    def __init__(self, url: str, cause: Exception) -> None:
        details = str(cause) or type(cause).__name__
        super().__init__(details, GatewayErrorCode.UPSTREAM_TRANSPORT_ERROR.value)
        self.url = url
        self.cause = cause


class ErrorLogWriteError(EdgeGatewayError):
    """Raised when a line cannot be appended to the error log file."""

    def __init__(self, path: Path, reason: str) -> None:
        message = f"Failed to write error log {path}: {reason}"
        super().__init__(message, GatewayErrorCode.ERROR_LOG_WRITE_ERROR.value)
        self.path = path
