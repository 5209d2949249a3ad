"""Serverless function adapter.

Lets the Gateway run as a function behind a platform that delivers
requests as event dictionaries (`httpMethod`, `rawUrl`, `headers`,
`body`, `isBase64Encoded`) and expects `{statusCode, headers, body}` back.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any
from urllib.parse import urlencode, urlsplit

import httpx

from services.edge_gateway_service.config import Settings, settings
from services.edge_gateway_service.core.catalog import CatalogStore
from services.edge_gateway_service.core.error_log import FileErrorLog
from services.edge_gateway_service.core.gateway import EdgeGateway, internal_error_response
from services.edge_gateway_service.implementations.upstream_client import HttpxUpstreamClient
from services.edge_gateway_service.logging_utils import create_service_logger
from services.edge_gateway_service.models import GatewayResponse, InboundRequest

logger = create_service_logger("edge_gateway.function_event")

# One catalog read per warm function instance, keyed by catalog path
_catalogs: dict[Path, CatalogStore] = {}


def _path_and_query(event: dict[str, Any]) -> tuple[str, str]:
    raw_url = event.get("rawUrl")
    if raw_url:
        parts = urlsplit(raw_url)
        return parts.path or "/", parts.query

    path = event.get("path") or "/"
    if event.get("rawQuery"):
        return path, event["rawQuery"]
    params = event.get("queryStringParameters") or {}
    return path, urlencode(params)


def _event_origin(event: dict[str, Any]) -> str | None:
    for name, value in (event.get("headers") or {}).items():
        if str(name).lower() == "origin":
            return str(value)
    return None


def inbound_from_event(event: dict[str, Any]) -> InboundRequest:
    path, query_string = _path_and_query(event)
    return InboundRequest(
        method=str(event.get("httpMethod", "GET")).upper(),
        path=path,
        query_string=query_string,
        headers={str(k): str(v) for k, v in (event.get("headers") or {}).items()},
        body=event.get("body"),
        is_base64_encoded=bool(event.get("isBase64Encoded", False)),
    )


def event_from_response(response: GatewayResponse) -> dict[str, Any]:
    return {
        "statusCode": response.status_code,
        "headers": dict(response.headers),
        "body": response.body,
    }


async def _catalog_for(path: Path, error_log: FileErrorLog) -> CatalogStore:
    if path not in _catalogs:
        _catalogs[path] = await CatalogStore.load_recorded(path, error_log)
    return _catalogs[path]


async def handle_event(event: dict[str, Any], config: Settings | None = None) -> dict[str, Any]:
    """Handle one function event with a short-lived HTTP client.

    Always returns a response event; a failure that escapes the Gateway is
    answered with the CORS-decorated internal error document.
    """
    config = config or settings
    error_log = FileErrorLog(config.ERROR_LOG_PATH)
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(config.HTTP_CLIENT_TIMEOUT_SECONDS),
            follow_redirects=config.HTTP_CLIENT_FOLLOW_REDIRECTS,
        ) as client:
            gateway = EdgeGateway(
                config=config,
                catalog=await _catalog_for(config.CATALOG_PATH, error_log),
                upstream_client=HttpxUpstreamClient(client),
                error_log=error_log,
            )
            response = await gateway.handle(inbound_from_event(event))
    except Exception as e:
        logger.error(
            "Unhandled gateway error",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        response = internal_error_response(_event_origin(event), config, e)
    return event_from_response(response)


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Synchronous entry point for function runtimes."""
    return asyncio.run(handle_event(event))
