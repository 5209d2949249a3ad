"""
Unified test configuration for Edge Gateway Service.

Provides isolated settings (catalog and error log under tmp_path), a
recording error log and a scripted upstream client for Gateway tests.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.enums import CorsPolicy, UpstreamHeaderProfile
from services.edge_gateway_service.exceptions import UpstreamTransportError
from services.edge_gateway_service.models import OutboundRequest

ALLOWED_ORIGIN = "http://localhost:4321"
UPSTREAM_HOST = "api.upstream.test"
CATALOG_DOCUMENT = {"categories": [{"id": 1, "name": "Exchanges"}], "sites": []}


def make_settings(tmp_path: Path, **overrides) -> Settings:
    """Settings pointing every file at tmp_path."""
    values = {
        "UPSTREAM_HOST": UPSTREAM_HOST,
        "CORS_ALLOWED_ORIGINS": [ALLOWED_ORIGIN, "https://walletdps.vercel.app"],
        "CORS_POLICY": CorsPolicy.STRICT,
        "UPSTREAM_HEADER_PROFILE": UpstreamHeaderProfile.BROWSER_LIKE,
        "CATALOG_PATH": tmp_path / "catalog.json",
        "ERROR_LOG_PATH": tmp_path / "error.log",
    }
    values.update(overrides)
    return Settings(**values)


class RecordingErrorLog:
    """Error log collaborator that keeps records in memory."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    async def record(self, context: str, message: str) -> None:
        self.records.append((context, message))


class ScriptedUpstreamClient:
    """Upstream client returning a canned response or raising a transport error."""

    def __init__(
        self,
        response: httpx.Response | None = None,
        error: Exception | None = None,
    ) -> None:
        self.response = response or httpx.Response(
            200, text='{"ok":true}', headers={"content-type": "application/json"}
        )
        self.error = error
        self.sent: list[OutboundRequest] = []

    async def send(self, outbound: OutboundRequest) -> httpx.Response:
        self.sent.append(outbound)
        if self.error is not None:
            raise UpstreamTransportError(outbound.url, self.error)
        return self.response


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(CATALOG_DOCUMENT), encoding="utf-8")
    return path


@pytest.fixture
def test_settings(tmp_path: Path, catalog_file: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def error_log() -> RecordingErrorLog:
    return RecordingErrorLog()


@pytest.fixture
def upstream() -> ScriptedUpstreamClient:
    return ScriptedUpstreamClient()
