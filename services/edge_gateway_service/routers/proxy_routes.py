"""
Catch-all route for Edge Gateway Service.

Every method and path lands here; the Gateway decides between preflight,
catalog, robots and proxy.
"""

from __future__ import annotations

import base64

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Request, Response

from services.edge_gateway_service.core.gateway import EdgeGateway
from services.edge_gateway_service.logging_utils import bind_request_context
from services.edge_gateway_service.models import (
    SUPPORTED_METHODS,
    GatewayResponse,
    InboundRequest,
)

router = APIRouter()


def _raw_path(request: Request) -> str:
    """Path exactly as sent on the wire, without percent-decoding."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    # Some ASGI transports include the query string in raw_path
    return raw_path.split(b"?", 1)[0].decode("latin-1")


async def inbound_from_request(request: Request) -> InboundRequest:
    """Build the InboundRequest descriptor from a Starlette request.

    Bodies that are not valid UTF-8 are carried base64-encoded with the
    flag set, the same shape serverless platforms hand to functions.
    """
    body: str | None = None
    is_base64_encoded = False
    payload = await request.body()
    if payload:
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError:
            body = base64.b64encode(payload).decode("ascii")
            is_base64_encoded = True

    return InboundRequest(
        method=request.method.upper(),
        path=_raw_path(request),
        query_string=request.scope.get("query_string", b"").decode("latin-1"),
        headers=dict(request.headers.items()),
        body=body,
        is_base64_encoded=is_base64_encoded,
    )


def to_http_response(response: GatewayResponse) -> Response:
    return Response(
        content=response.body,
        status_code=response.status_code,
        headers=response.headers,
    )


@router.api_route(
    "/{full_path:path}",
    methods=list(SUPPORTED_METHODS),
    include_in_schema=False,
    response_model=None,
)
@inject
async def gateway_entry(
    request: Request,
    full_path: str,
    gateway: FromDishka[EdgeGateway],
) -> Response:
    """Hand the request to the Gateway and relay its response."""
    inbound = await inbound_from_request(request)
    bind_request_context(inbound.method, inbound.path)
    result = await gateway.handle(inbound)
    return to_http_response(result)
