"""Outbound request builder.

Translates an InboundRequest into the synthetic request sent upstream.
Only an explicit set of caller headers is carried over; everything else
(Host, cookies, Content-Length, ...) is dropped.
"""

from __future__ import annotations

import base64
import binascii

from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.enums import UpstreamHeaderProfile
from services.edge_gateway_service.logging_utils import create_service_logger
from services.edge_gateway_service.models import InboundRequest, OutboundRequest

logger = create_service_logger("edge_gateway.outbound")

ACCEPT_VALUE = "application/json, text/plain, */*"
JSON_CONTENT_TYPE = "application/json"

# (inbound name, outbound name); copied only when present and non-empty
PASSTHROUGH_HEADERS: tuple[tuple[str, str], ...] = (
    ("X-Auth-Token", "X-Auth-Token"),
    ("X-App-ClientId", "X-App-Clientid"),
)

BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
BODY_METHODS: dict[UpstreamHeaderProfile, frozenset[str]] = {
    UpstreamHeaderProfile.MINIMAL: frozenset({"POST", "PUT", "PATCH"}),
    UpstreamHeaderProfile.BROWSER_LIKE: frozenset({"POST", "PUT", "PATCH", "DELETE"}),
}


def build_target_url(upstream_host: str, forward_path: str, query_string: str) -> str:
    """Absolute upstream URL; path and query are appended verbatim."""
    url = f"https://{upstream_host}{forward_path}"
    if query_string:
        url = f"{url}?{query_string}"
    return url


def build_outbound_headers(inbound: InboundRequest, config: Settings) -> dict[str, str]:
    headers = {
        "Accept": ACCEPT_VALUE,
        "Content-Type": JSON_CONTENT_TYPE,
        "X-App-Env": inbound.header("X-App-Env") or config.DEFAULT_APP_ENV,
    }

    if config.UPSTREAM_HEADER_PROFILE == UpstreamHeaderProfile.BROWSER_LIKE:
        site_origin = config.UPSTREAM_SITE_ORIGIN.rstrip("/")
        headers.update(
            {
                "Origin": site_origin,
                "Referer": f"{site_origin}/",
                "User-Agent": config.UPSTREAM_USER_AGENT,
                "Connection": "keep-alive",
            }
        )

    for inbound_name, outbound_name in PASSTHROUGH_HEADERS:
        value = inbound.header(inbound_name)
        if value:
            headers[outbound_name] = value

    return headers


def decode_body(inbound: InboundRequest) -> str | None:
    """Return the body as text, decoding base64 payloads."""
    if not inbound.body:
        return None
    if not inbound.is_base64_encoded:
        return inbound.body
    try:
        raw = base64.b64decode(inbound.body)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Body flagged as base64 could not be decoded, forwarding as-is: {e}")
        return inbound.body
    return raw.decode("utf-8", errors="replace")


def build_outbound_body(inbound: InboundRequest, profile: UpstreamHeaderProfile) -> str | None:
    if inbound.method in BODYLESS_METHODS:
        return None
    if inbound.method not in BODY_METHODS[profile]:
        return None
    return decode_body(inbound)


def build_outbound_request(
    inbound: InboundRequest, forward_path: str, config: Settings
) -> OutboundRequest:
    """Build the upstream request for a proxied call.

    Args:
        inbound: The caller's request
        forward_path: Path after prefix stripping, trailing slashes preserved
        config: Service settings (upstream host and header profile)

    Returns:
        OutboundRequest ready to hand to the upstream client
    """
    return OutboundRequest(
        url=build_target_url(config.UPSTREAM_HOST, forward_path, inbound.query_string),
        method=inbound.method,
        headers=build_outbound_headers(inbound, config),
        body=build_outbound_body(inbound, config.UPSTREAM_HEADER_PROFILE),
    )
