"""
Configuration loading utilities.

Loads feeds.yaml from a configuration directory, merges it over the
built-in defaults and validates the result with the Pydantic models in
market_feed.config.models.

Environment variables:
    MARKET_FEED_CONFIG: Configuration directory used when none is passed
    LOG_LEVEL: Overrides logging.level from the file

Example:
    >>> from market_feed.config import load_config
    >>> config = load_config("config")
    >>> config.collector.default_limit
    20
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import ValidationError

from market_feed.config.models import (
    DEFAULT_ENDPOINTS,
    CollectorSettings,
    EndpointsConfig,
    FeedConfig,
    LoggingSettings,
)

logger = structlog.get_logger(__name__)

CONFIG_FILENAME = "feeds.yaml"


class ConfigLoadError(Exception):
    """
    Raised when configuration loading fails.

    Attributes:
        message: Error message describing what went wrong.
        file_path: Path to the file that caused the error, if applicable.
        cause: Original exception that caused the error, if any.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


class ConfigLoader:
    """
    Loads and validates feed configuration from a YAML file.

    Expects the following directory structure:
        config/
        └── feeds.yaml    - Endpoints, collector defaults and logging

    Example:
        >>> loader = ConfigLoader("config")
        >>> config = loader.load()
        >>> config.endpoints.get_url("binance", "spot")
        'wss://stream.binance.com:9443/ws'
    """

    def __init__(self, config_dir: Path | str = "config"):
        """
        Initialize config loader.

        Args:
            config_dir: Path to configuration directory (default: 'config').

        Raises:
            ConfigLoadError: If config directory does not exist.
        """
        self.config_dir = Path(config_dir)
        if not self.config_dir.exists():
            raise ConfigLoadError(
                f"Configuration directory not found: {self.config_dir}",
                file_path=self.config_dir,
            )
        if not self.config_dir.is_dir():
            raise ConfigLoadError(
                f"Configuration path is not a directory: {self.config_dir}",
                file_path=self.config_dir,
            )

    def _load_yaml(self, filename: str) -> Dict[str, Any]:
        """
        Load a YAML file from the config directory.

        Raises:
            ConfigLoadError: If file not found, empty, or invalid YAML.
        """
        file_path = self.config_dir / filename
        if not file_path.exists():
            raise ConfigLoadError(
                f"Configuration file not found: {file_path}",
                file_path=file_path,
            )

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Invalid YAML syntax in {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigLoadError(
                f"Error reading {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e

        if data is None:
            raise ConfigLoadError(
                f"Configuration file is empty: {file_path}",
                file_path=file_path,
            )
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Configuration root must be a mapping: {file_path}",
                file_path=file_path,
            )
        return data

    def load(self) -> FeedConfig:
        """
        Load and validate the configuration.

        Endpoints from the file are merged over the built-in defaults, so a
        file only needs to list the endpoints it changes.

        Returns:
            FeedConfig: Validated configuration.

        Raises:
            ConfigLoadError: If the file is missing or fails validation.
        """
        file_path = self.config_dir / CONFIG_FILENAME
        data = self._load_yaml(CONFIG_FILENAME)

        try:
            providers = {k: dict(v) for k, v in DEFAULT_ENDPOINTS.items()}
            for provider, markets in (data.get("endpoints") or {}).items():
                providers.setdefault(str(provider).lower(), {}).update(markets or {})

            logging_data = dict(data.get("logging") or {})
            env_level = os.getenv("LOG_LEVEL")
            if env_level:
                logging_data["level"] = env_level

            config = FeedConfig(
                endpoints=EndpointsConfig(providers=providers),
                collector=CollectorSettings(**(data.get("collector") or {})),
                logging=LoggingSettings(**logging_data),
            )
        except ValidationError as e:
            raise ConfigLoadError(
                f"Invalid feed configuration: {e}",
                file_path=file_path,
                cause=e,
            ) from e
        except (AttributeError, TypeError) as e:
            raise ConfigLoadError(
                f"Malformed section in {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e

        logger.info(
            "config_loaded",
            file=str(file_path),
            providers=sorted(config.endpoints.providers),
        )
        return config


def load_config(config_dir: Path | str | None = None) -> FeedConfig:
    """
    Load configuration.

    Args:
        config_dir: Configuration directory. Falls back to the
            MARKET_FEED_CONFIG environment variable; when neither is set
            the built-in defaults are returned.

    Returns:
        FeedConfig: Validated configuration.

    Raises:
        ConfigLoadError: If a directory was given but cannot be loaded.
    """
    config_dir = config_dir or os.getenv("MARKET_FEED_CONFIG")
    if not config_dir:
        env_level = os.getenv("LOG_LEVEL")
        if env_level:
            try:
                return FeedConfig(logging=LoggingSettings(level=env_level))
            except ValidationError as e:
                raise ConfigLoadError(f"Invalid LOG_LEVEL: {env_level}", cause=e) from e
        return FeedConfig()
    return ConfigLoader(config_dir).load()
