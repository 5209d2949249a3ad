"""
Data models for Edge Gateway Service.

Request and response descriptors exchanged between the HTTP layer,
the serverless adapter and the Gateway. All of them are immutable.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

SUPPORTED_METHODS: tuple[str, ...] = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


class InboundRequest(BaseModel):
    """Request as received from the caller, before any rewriting.

    `path` and `query_string` are kept exactly as they arrived on the wire
    (no percent-decoding); `query_string` excludes the leading "?".
    """

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    path: str
    query_string: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    is_base64_encoded: bool = False

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def origin(self) -> str:
        return self.header("Origin") or ""


class OutboundRequest(BaseModel):
    """Synthetic request sent to the upstream host."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: HttpMethod
    headers: dict[str, str]
    body: str | None = None


class GatewayResponse(BaseModel):
    """The single response produced for every inbound request."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = ""


class NormalizedPath(BaseModel):
    """Result of prefix stripping.

    `clean` is used for route matching only; `forward` keeps the caller's
    trailing slashes and is appended to the upstream host.
    """

    model_config = ConfigDict(frozen=True)

    clean: str
    forward: str
