"""Central configuration object (env‑driven).

Uses Pydantic *BaseSettings* so everything can be overridden via environment
variables or a local *.env* file.  The three host‑connection values
(``socket``, ``timeout``, ``interval``) normally arrive as command‑line flags
from osqueryd and are overlaid by :func:`load_settings`.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Required startup parameters are missing or invalid."""


class Settings(BaseSettings):
    """Load settings from env vars or .env."""

    # Upstream API --------------------------------------------------------

    api_key: Optional[str] = Field(
        default=None,
        description="Tailscale API access token",
    )
    tailnet: str = Field(
        default="-",
        description="Tailnet name; '-' means the API key's own tailnet",
    )
    api_url: str = Field(
        default="https://api.tailscale.com",
        description="Base URL of the Tailscale API",
    )
    http_timeout: float = Field(default=30.0, gt=0, description="Upstream HTTP timeout (seconds)")

    # Cache ---------------------------------------------------------------

    cache_ttl: float = Field(default=90.0, gt=0, description="Freshness window (seconds)")
    cache_sweep_interval: float = Field(
        default=600.0,
        description="Seconds between expired‑entry sweeps (<= 0 disables)",
    )
    scan_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds a table scan waits on an upstream fetch (None = no limit)",
    )

    # Host connection (command‑line flags).  osquery.start_extension re‑reads
    # these from sys.argv itself; they are kept here for validation and logging.

    socket: Optional[str] = Field(default=None, description="Path to osquery socket file")
    timeout: int = Field(
        default=0,
        ge=0,
        description="Host connection timeout (seconds); consumed by osquery.start_extension",
    )
    interval: int = Field(
        default=0,
        ge=0,
        description="Host ping interval (seconds); consumed by osquery.start_extension",
    )
    verbose: bool = False

    model_config = SettingsConfigDict(
        env_prefix="TAILSCALE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def validate_for_serving(self) -> None:
        """Raise :class:`ConfigurationError` unless tables can be served."""
        missing = []
        if not self.socket:
            missing.append("--socket")
        if not self.api_key:
            missing.append("TAILSCALE_API_KEY")
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")


def load_settings(**overrides: Any) -> Settings:
    """Build :class:`Settings`, letting non‑``None`` *overrides* win over env."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
