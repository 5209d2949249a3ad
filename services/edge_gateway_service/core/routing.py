"""Route dispatch: exact string matching on the clean path."""

from __future__ import annotations

from services.edge_gateway_service.enums import RouteKind

CATALOG_PATH = "/v2/dapp/catalog"
ROBOTS_PATH = "/robots.txt"


def resolve_route(method: str, clean_path: str) -> RouteKind:
    """Pick the terminal outcome for a request; unmatched paths are proxied."""
    if method == "OPTIONS":
        return RouteKind.PREFLIGHT
    if clean_path == CATALOG_PATH:
        return RouteKind.CATALOG
    if clean_path == ROBOTS_PATH:
        return RouteKind.ROBOTS
    return RouteKind.PROXY
