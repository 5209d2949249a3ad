"""
Configuration for Edge Gateway Service.

Uses Pydantic settings for environment-based configuration. Both policy
profiles of the gateway (CORS fallback and outbound header set) are chosen
here rather than in code.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from services.edge_gateway_service.enums import (
    CorsPolicy,
    Environment,
    UpstreamHeaderProfile,
)

_SERVICE_DIR = Path(__file__).resolve().parent

DEFAULT_CORS_ORIGINS: list[str] = [
    "http://localhost:4321",
    "http://127.0.0.1:4321",
    "http://localhost:4323",
    "http://127.0.0.1:4323",
    "http://localhost:4355",
    "http://127.0.0.1:4355",
    "http://localhost:8888",
    "http://127.0.0.1:8888",
    "https://dpsmult.netlify.app",
    "https://walletdpstg.netlify.app",
    "https://multisend-livid.vercel.app",
    "https://walletdps.vercel.app",
    "https://walletdps.netlify.app",
    "https://walletdps.netlify.com",
]

# Evaluated in order, each at most once.
DEFAULT_PATH_PREFIX_RULES: list[tuple[str, str]] = [
    ("/.netlify/functions/proxy", ""),  # function mount point
    ("/proxy", ""),  # legacy redirect prefix
]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Configuration settings for Edge Gateway Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EDGE_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Service identity
    SERVICE_NAME: str = "edge-gateway-service"

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",  # Read from global ENVIRONMENT var
        description="Runtime environment for the service",
    )

    # HTTP server configuration
    HTTP_HOST: str = Field(default="0.0.0.0", description="HTTP server host")
    HTTP_PORT: int = Field(default=8888, description="HTTP server port")

    # Logging configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Upstream
    UPSTREAM_HOST: str = Field(
        default="api.mytonwallet.org", description="Host every proxied request is sent to"
    )
    UPSTREAM_SITE_ORIGIN: str = Field(
        default="https://mytonwallet.org",
        description="Origin/Referer presented to upstream by the browser-like profile",
    )
    UPSTREAM_USER_AGENT: str = Field(
        default=DEFAULT_USER_AGENT, description="User-Agent of the browser-like profile"
    )
    UPSTREAM_HEADER_PROFILE: UpstreamHeaderProfile = Field(
        default=UpstreamHeaderProfile.BROWSER_LIKE,
        description="Outbound header set: minimal or browser-like",
    )
    DEFAULT_APP_ENV: str = Field(
        default="Production", description="X-App-Env sent when the caller omits it"
    )

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
        description="Origins granted by exact match",
    )
    CORS_POLICY: CorsPolicy = Field(
        default=CorsPolicy.STRICT,
        description="Answer for origins outside the allow-list: strict (null) or wildcard (*)",
    )

    # Routing
    PATH_PREFIX_RULES: list[tuple[str, str]] = Field(
        default_factory=lambda: list(DEFAULT_PATH_PREFIX_RULES),
        description="Ordered (prefix, replacement) rules applied to the request path",
    )
    CATALOG_PATH: Path = Field(
        default=_SERVICE_DIR / "catalog.json", description="Static catalog document"
    )

    # Error handling
    TRANSPORT_ERROR_STATUS: int = Field(
        default=502, description="Status returned when upstream cannot be reached"
    )
    ERROR_LOG_PATH: Path = Field(
        default=_SERVICE_DIR / "error.log", description="Append-only error log file"
    )

    # HTTP client; no timeout unless configured
    HTTP_CLIENT_TIMEOUT_SECONDS: float | None = None
    HTTP_CLIENT_FOLLOW_REDIRECTS: bool = True

    # Health and metrics routes
    OPS_ROUTES_ENABLED: bool = Field(
        default=False,
        description="Serve /healthz and /metrics under OPS_ROUTE_PREFIX instead of proxying them",
    )
    OPS_ROUTE_PREFIX: str = Field(default="/_edge", description="Prefix for ops routes")

    def is_development(self) -> bool:
        return self.ENVIRONMENT in (Environment.DEVELOPMENT, Environment.TESTING)

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION


# Global settings instance
settings = Settings()
