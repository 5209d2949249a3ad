"""
Tests for EdgeGateway route dispatch and response translation.

Uses a scripted upstream client so that every outbound request can be
inspected without network access; header encoding goes through the real
httpx client with respx.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from prometheus_client import CollectorRegistry
from respx import MockRouter

from services.edge_gateway_service.app.metrics import GatewayMetrics
from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.core.catalog import CatalogStore
from services.edge_gateway_service.core.gateway import EdgeGateway, internal_error_response
from services.edge_gateway_service.enums import CorsPolicy
from services.edge_gateway_service.implementations.upstream_client import HttpxUpstreamClient
from services.edge_gateway_service.models import InboundRequest
from services.edge_gateway_service.protocols import UpstreamClientProtocol
from services.edge_gateway_service.tests.conftest import (
    ALLOWED_ORIGIN,
    CATALOG_DOCUMENT,
    UPSTREAM_HOST,
    RecordingErrorLog,
    ScriptedUpstreamClient,
    make_settings,
)

GRANTED = {
    "Access-Control-Allow-Origin": ALLOWED_ORIGIN,
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Max-Age": "86400",
}


def build_gateway(
    config: Settings,
    upstream: UpstreamClientProtocol,
    error_log: RecordingErrorLog,
    metrics: GatewayMetrics | None = None,
) -> EdgeGateway:
    return EdgeGateway(
        config=config,
        catalog=CatalogStore.load(config.CATALOG_PATH),
        upstream_client=upstream,
        error_log=error_log,
        metrics=metrics,
    )


@pytest.fixture
def gateway(test_settings, upstream, error_log) -> EdgeGateway:
    return build_gateway(test_settings, upstream, error_log)


def request(method: str = "GET", path: str = "/", **kwargs) -> InboundRequest:
    headers = kwargs.pop("headers", {"origin": ALLOWED_ORIGIN})
    return InboundRequest(method=method, path=path, headers=headers, **kwargs)


class TestPreflight:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/", "/v2/dapp/catalog", "/robots.txt", "/anything/else"])
    async def test_options_short_circuits_on_any_path(self, gateway, upstream, path) -> None:
        response = await gateway.handle(request("OPTIONS", path))

        assert response.status_code == 200
        assert response.body == ""
        assert response.headers == GRANTED
        assert upstream.sent == []

    @pytest.mark.asyncio
    async def test_options_from_unknown_origin_gets_denial(self, gateway) -> None:
        response = await gateway.handle(
            request("OPTIONS", "/x", headers={"Origin": "https://evil.example"})
        )

        assert response.status_code == 200
        assert response.headers == {"Access-Control-Allow-Origin": "null"}


class TestLocalRoutes:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        [
            "/.netlify/functions/proxy/v2/dapp/catalog",
            "/proxy/v2/dapp/catalog",
            "/v2/dapp/catalog",
            "/v2/dapp/catalog/",
        ],
    )
    async def test_catalog_served_for_every_prefix(self, gateway, upstream, path) -> None:
        response = await gateway.handle(request("GET", path))

        assert response.status_code == 200
        assert response.headers == {**GRANTED, "Content-Type": "application/json"}
        assert json.loads(response.body) == CATALOG_DOCUMENT
        assert upstream.sent == []

    @pytest.mark.asyncio
    async def test_catalog_error_document_when_load_failed(
        self, tmp_path: Path, upstream, error_log
    ) -> None:
        config = make_settings(tmp_path, CATALOG_PATH=tmp_path / "absent.json")
        gateway = build_gateway(config, upstream, error_log)

        response = await gateway.handle(request("GET", "/v2/dapp/catalog"))

        assert response.status_code == 200
        assert json.loads(response.body) == {"error": "Catalog missing or invalid JSON"}

    @pytest.mark.asyncio
    async def test_robots_is_empty_and_local(self, gateway, upstream) -> None:
        response = await gateway.handle(request("GET", "/.netlify/functions/proxy/robots.txt"))

        assert response.status_code == 200
        assert response.body == ""
        assert response.headers == GRANTED
        assert upstream.sent == []

    @pytest.mark.asyncio
    async def test_catalog_match_is_exact(self, gateway, upstream) -> None:
        await gateway.handle(request("GET", "/v2/dapp/catalog/extra"))

        assert upstream.sent[0].url == f"https://{UPSTREAM_HOST}/v2/dapp/catalog/extra"

    @pytest.mark.asyncio
    async def test_reload_catalog_serves_new_document(self, gateway, catalog_file) -> None:
        catalog_file.write_text(json.dumps({"sites": [1]}), encoding="utf-8")

        await gateway.reload_catalog()
        response = await gateway.handle(request("GET", "/v2/dapp/catalog"))

        assert json.loads(response.body) == {"sites": [1]}

    @pytest.mark.asyncio
    async def test_reload_failure_is_recorded(self, gateway, catalog_file, error_log) -> None:
        catalog_file.unlink()

        store = await gateway.reload_catalog()

        assert store.loaded is False
        assert error_log.records[0][0] == "Catalog load error"


class TestProxy:
    @pytest.mark.asyncio
    async def test_query_string_preserved(self, gateway, upstream) -> None:
        await gateway.handle(request("GET", "/foo", query_string="x=1"))

        assert upstream.sent[0].url == f"https://{UPSTREAM_HOST}/foo?x=1"
        assert upstream.sent[0].method == "GET"

    @pytest.mark.asyncio
    async def test_forward_path_keeps_trailing_slash(self, gateway, upstream) -> None:
        await gateway.handle(request("GET", "/proxy/v2/wallet/"))

        assert upstream.sent[0].url == f"https://{UPSTREAM_HOST}/v2/wallet/"

    @pytest.mark.asyncio
    async def test_base64_post_body_decoded(self, gateway, upstream) -> None:
        await gateway.handle(
            request("POST", "/submit", body="eyJhIjoxfQ==", is_base64_encoded=True)
        )

        assert upstream.sent[0].body == '{"a":1}'

    @pytest.mark.asyncio
    async def test_success_relayed(self, gateway, error_log) -> None:
        response = await gateway.handle(request("GET", "/foo"))

        assert response.status_code == 200
        assert response.body == '{"ok":true}'
        assert response.headers == {**GRANTED, "Content-Type": "application/json"}
        assert error_log.records == []

    @pytest.mark.asyncio
    async def test_upstream_404_relayed_and_logged(self, test_settings, error_log) -> None:
        upstream = ScriptedUpstreamClient(
            httpx.Response(404, text="Not Found", headers={"content-type": "text/plain"})
        )
        gateway = build_gateway(test_settings, upstream, error_log)

        response = await gateway.handle(request("GET", "/missing"))

        assert response.status_code == 404
        assert response.body == "Not Found"
        assert response.headers["Content-Type"] == "text/plain"
        assert error_log.records == [("API Error 404", "Not Found")]

    @pytest.mark.asyncio
    async def test_logged_error_body_is_truncated(self, test_settings, error_log) -> None:
        upstream = ScriptedUpstreamClient(httpx.Response(500, text="x" * 500))
        gateway = build_gateway(test_settings, upstream, error_log)

        response = await gateway.handle(request("GET", "/boom"))

        assert response.body == "x" * 500
        assert error_log.records == [("API Error 500", "x" * 200)]

    @pytest.mark.asyncio
    async def test_missing_upstream_content_type_defaults_to_json(
        self, test_settings, error_log
    ) -> None:
        upstream = ScriptedUpstreamClient(httpx.Response(201, content=b"created"))
        gateway = build_gateway(test_settings, upstream, error_log)

        response = await gateway.handle(request("POST", "/items", body="{}"))

        assert response.status_code == 201
        assert response.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_transport_failure_translated(self, test_settings, error_log) -> None:
        upstream = ScriptedUpstreamClient(error=httpx.ConnectError("Connection refused"))
        gateway = build_gateway(test_settings, upstream, error_log)

        response = await gateway.handle(request("GET", "/foo"))

        assert response.status_code == 502
        assert response.headers == {**GRANTED, "Content-Type": "application/json"}
        body = json.loads(response.body)
        assert "Connection refused" in body["error"]
        assert body["details"] == "Connection refused"
        assert error_log.records == [("Network Error", "Connection refused")]

    @pytest.mark.asyncio
    async def test_transport_failure_status_is_configurable(self, tmp_path, error_log) -> None:
        config = make_settings(tmp_path, TRANSPORT_ERROR_STATUS=500)
        upstream = ScriptedUpstreamClient(error=httpx.ReadTimeout("timed out"))
        gateway = build_gateway(config, upstream, error_log)

        response = await gateway.handle(request("GET", "/foo"))

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_failure_with_empty_message_uses_exception_name(
        self, test_settings, error_log
    ) -> None:
        upstream = ScriptedUpstreamClient(error=httpx.ConnectTimeout(""))
        gateway = build_gateway(test_settings, upstream, error_log)

        response = await gateway.handle(request("GET", "/foo"))

        assert json.loads(response.body)["details"] == "ConnectTimeout"

    @pytest.mark.asyncio
    async def test_wildcard_policy_applies_to_error_response(
        self, tmp_path, error_log
    ) -> None:
        config = make_settings(tmp_path, CORS_POLICY=CorsPolicy.WILDCARD)
        upstream = ScriptedUpstreamClient(error=httpx.ConnectError("refused"))
        gateway = build_gateway(config, upstream, error_log)

        response = await gateway.handle(
            request("GET", "/foo", headers={"Origin": "https://elsewhere.example"})
        )

        assert response.headers["Access-Control-Allow-Origin"] == "*"


class TestMetrics:
    @pytest.mark.asyncio
    async def test_requests_counted_by_route(self, test_settings, upstream, error_log) -> None:
        registry = CollectorRegistry()
        gateway = build_gateway(test_settings, upstream, error_log, GatewayMetrics(registry))

        await gateway.handle(request("OPTIONS", "/x"))
        await gateway.handle(request("GET", "/foo"))

        assert (
            registry.get_sample_value(
                "edge_gateway_requests_total",
                {"method": "OPTIONS", "route": "preflight", "http_status": "200"},
            )
            == 1.0
        )
        assert (
            registry.get_sample_value(
                "edge_gateway_upstream_calls_total", {"method": "GET", "status_code": "200"}
            )
            == 1.0
        )


class TestCallerHeaderEncoding:
    """Caller header values arrive latin-1 decoded and must not break forwarding."""

    @pytest.mark.asyncio
    async def test_latin1_auth_token_forwarded_as_original_bytes(
        self, test_settings, error_log, respx_mock: MockRouter
    ) -> None:
        route = respx_mock.get(f"https://{UPSTREAM_HOST}/foo").mock(
            return_value=httpx.Response(200, json={"ok": True})
        )
        async with httpx.AsyncClient() as client:
            gateway = build_gateway(test_settings, HttpxUpstreamClient(client), error_log)
            response = await gateway.handle(
                request("GET", "/foo", headers={"origin": ALLOWED_ORIGIN, "x-auth-token": "té"})
            )

        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
        sent = {name.lower(): value for name, value in route.calls.last.request.headers.raw}
        assert sent[b"x-auth-token"] == b"t\xe9"

    @pytest.mark.asyncio
    async def test_unencodable_header_becomes_transport_failure(
        self, test_settings, error_log, respx_mock: MockRouter
    ) -> None:
        async with httpx.AsyncClient() as client:
            gateway = build_gateway(test_settings, HttpxUpstreamClient(client), error_log)
            response = await gateway.handle(
                request("GET", "/foo", headers={"origin": ALLOWED_ORIGIN, "x-app-env": "€"})
            )

        assert response.status_code == 502
        assert response.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
        assert "Upstream connection failed" in json.loads(response.body)["error"]
        assert error_log.records[0][0] == "Network Error"
        assert not respx_mock.calls


def test_internal_error_response_is_cors_decorated_json(test_settings) -> None:
    response = internal_error_response(ALLOWED_ORIGIN, test_settings, RuntimeError("boom"))

    assert response.status_code == 500
    assert response.headers == {**GRANTED, "Content-Type": "application/json"}
    assert json.loads(response.body) == {"error": "Internal gateway error", "details": "boom"}
