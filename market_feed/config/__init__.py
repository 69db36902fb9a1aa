"""
Configuration management for market feed collection.

Configuration is optional: every setting has a default, and a YAML file in
the config/ directory can override endpoints, collector defaults and
logging:

    - feeds.yaml: Endpoints, collector defaults and logging

Environment variables:
    - MARKET_FEED_CONFIG: Configuration directory
    - LOG_LEVEL: Application log level

Example:
    >>> from market_feed.config import load_config
    >>> config = load_config()
    >>> config.endpoints.get_url("aster", "futures")
    'wss://fapi.asterdex.com/ws'

Modules:
    loader: Configuration file loading utilities
    models: Pydantic models for configuration validation
"""

from market_feed.config.loader import ConfigLoadError, ConfigLoader, load_config
from market_feed.config.models import (
    DEFAULT_ENDPOINTS,
    CollectorSettings,
    EndpointsConfig,
    FeedConfig,
    LogFormat,
    LoggingSettings,
    LogLevel,
)

__all__ = [
    # Loader
    "ConfigLoader",
    "ConfigLoadError",
    "load_config",
    # Models
    "DEFAULT_ENDPOINTS",
    "CollectorSettings",
    "EndpointsConfig",
    "FeedConfig",
    "LogFormat",
    "LoggingSettings",
    "LogLevel",
]
