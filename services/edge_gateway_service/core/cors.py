"""CORS decisioning.

A pure function of the caller's Origin, the static allow-list and the
configured fallback policy. Origins are compared by exact string match.
"""

from __future__ import annotations

from collections.abc import Collection

from services.edge_gateway_service.enums import CorsPolicy

ALLOWED_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
ALLOWED_HEADERS = "*"
PREFLIGHT_MAX_AGE_SECONDS = 86400

DENIED_ORIGIN = "null"
WILDCARD_ORIGIN = "*"


def _grant(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE_SECONDS),
    }


def decide_cors_headers(
    origin: str,
    allowed_origins: Collection[str],
    policy: CorsPolicy = CorsPolicy.STRICT,
) -> dict[str, str]:
    """Return the CORS headers to attach to a response.

    Args:
        origin: Value of the caller's Origin header ("" when absent)
        allowed_origins: Exact-match allow-list
        policy: Fallback for origins outside the allow-list

    Returns:
        A fresh header mapping with 1 to 4 entries

    Example:
        >>> decide_cors_headers("https://evil.example", [], CorsPolicy.STRICT)
        {'Access-Control-Allow-Origin': 'null'}
    """
    if origin and origin in allowed_origins:
        return _grant(origin)
    if policy == CorsPolicy.WILDCARD:
        return _grant(WILDCARD_ORIGIN)
    return {"Access-Control-Allow-Origin": DENIED_ORIGIN}
