"""
Pydantic models for application configuration.

This module defines the configuration models that are validated when loading
the YAML configuration file. The models ensure type safety and provide
sensible defaults, so the library works without any configuration file.

Configuration file:
    - config/feeds.yaml: Endpoints, collector defaults and logging

Example:
    >>> from market_feed.config.models import FeedConfig
    >>> config = FeedConfig()
    >>> config.endpoints.get_url("binance", "futures")
    'wss://fstream.binance.com/ws'
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from market_feed.models.stream import DecodeErrorPolicy


# =============================================================================
# ENUMS
# =============================================================================


class LogFormat(str, Enum):
    """Logging format options."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Logging level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# ENDPOINT CONFIGURATION
# =============================================================================


DEFAULT_ENDPOINTS: Dict[str, Dict[str, str]] = {
    "binance": {
        "futures": "wss://fstream.binance.com/ws",
        "spot": "wss://stream.binance.com:9443/ws",
    },
    "aster": {
        "futures": "wss://fapi.asterdex.com/ws",
    },
    "okx": {
        "public": "wss://ws.okx.com:8443/ws/v5/public",
    },
}


class EndpointsConfig(BaseModel):
    """
    Streaming endpoint URLs keyed by provider and market.

    Example:
        >>> endpoints = EndpointsConfig()
        >>> endpoints.get_url("okx", "public")
        'wss://ws.okx.com:8443/ws/v5/public'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    providers: Dict[str, Dict[str, str]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_ENDPOINTS.items()},
        description="provider -> market -> WebSocket URL",
    )

    @field_validator("providers", mode="before")
    @classmethod
    def normalize_keys(cls, v: Dict[str, Dict[str, str]]) -> Dict[str, Dict[str, str]]:
        """Lower-case provider and market keys."""
        return {
            str(provider).lower(): {str(m).lower(): url for m, url in (markets or {}).items()}
            for provider, markets in (v or {}).items()
        }

    def get_url(self, provider: str, market: str) -> Optional[str]:
        """
        Get the WebSocket URL for a provider and market.

        Args:
            provider: Provider name (e.g., "binance", "okx").
            market: Market segment (e.g., "futures", "spot", "public").

        Returns:
            Optional[str]: WebSocket URL or None if not configured.
        """
        return self.providers.get(provider.lower(), {}).get(market.lower())

    def with_override(self, provider: str, market: str, url: str) -> "EndpointsConfig":
        """Return a copy with one endpoint replaced or added."""
        providers = {k: dict(v) for k, v in self.providers.items()}
        providers.setdefault(provider.lower(), {})[market.lower()] = url
        return EndpointsConfig(providers=providers)


# =============================================================================
# COLLECTOR CONFIGURATION
# =============================================================================


class CollectorSettings(BaseModel):
    """Defaults and connection settings for collection runs."""

    model_config = {"frozen": True, "extra": "forbid"}

    default_limit: int = Field(
        default=20,
        description="Message limit used when the caller does not pass one",
        ge=1,
    )
    default_duration_ms: int = Field(
        default=5000,
        description="Duration budget used when the caller does not pass one",
        ge=1,
    )
    decode_errors: DecodeErrorPolicy = Field(
        default=DecodeErrorPolicy.SKIP,
        description="What to do with a frame that cannot be decoded",
    )
    open_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for the opening handshake",
        gt=0,
        le=120,
    )
    close_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for the closing handshake",
        gt=0,
        le=60,
    )
    max_message_bytes: int = Field(
        default=2**20,
        description="Maximum inbound frame size",
        ge=1024,
    )


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level",
    )
    format: LogFormat = Field(
        default=LogFormat.JSON,
        description="Log output format",
    )

    @field_validator("level", mode="before")
    @classmethod
    def uppercase_level(cls, v):
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class FeedConfig(BaseModel):
    """Root configuration object."""

    model_config = {"frozen": True, "extra": "forbid"}

    endpoints: EndpointsConfig = Field(
        default_factory=EndpointsConfig,
        description="Streaming endpoints",
    )
    collector: CollectorSettings = Field(
        default_factory=CollectorSettings,
        description="Collector settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging settings",
    )
