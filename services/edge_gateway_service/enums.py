"""
edge_gateway_service.enums - Enums shared across the Edge Gateway Service.
"""

from __future__ import annotations

from enum import Enum


class Environment(str, Enum):
    """Defines application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class CorsPolicy(str, Enum):
    """How origins outside the allow-list are answered."""

    STRICT = "strict"  # deny with Access-Control-Allow-Origin: null
    WILDCARD = "wildcard"  # grant "*" to every caller


class UpstreamHeaderProfile(str, Enum):
    """Header set synthesized for the outbound upstream call."""

    MINIMAL = "minimal"
    BROWSER_LIKE = "browser-like"


class RouteKind(str, Enum):
    """Terminal outcomes of route dispatch, in evaluation order."""

    PREFLIGHT = "preflight"
    CATALOG = "catalog"
    ROBOTS = "robots"
    PROXY = "proxy"


class GatewayErrorCode(str, Enum):
    """Error codes carried by EdgeGatewayError subclasses."""

    CATALOG_LOAD_ERROR = "CATALOG_LOAD_ERROR"
    UPSTREAM_TRANSPORT_ERROR = "UPSTREAM_TRANSPORT_ERROR"
    ERROR_LOG_WRITE_ERROR = "ERROR_LOG_WRITE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
