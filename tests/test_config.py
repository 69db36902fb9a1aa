"""
Unit Tests for Configuration Loading and Logging Setup

Run with:
    pytest tests/test_config.py -v
"""

import logging
from pathlib import Path

import pytest
import structlog

from market_feed.config import (
    ConfigLoader,
    ConfigLoadError,
    EndpointsConfig,
    FeedConfig,
    LogFormat,
    LogLevel,
    load_config,
)
from market_feed.logging import setup_logging
from market_feed.models.stream import DecodeErrorPolicy

REPO_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("MARKET_FEED_CONFIG", raising=False)


def write_config(directory: Path, text: str) -> Path:
    path = directory / "feeds.yaml"
    path.write_text(text, encoding="utf-8")
    return directory


# ============================================
# Tests for Defaults
# ============================================


class TestDefaults:
    """Tests for built-in configuration"""

    def test_default_endpoints(self):
        endpoints = EndpointsConfig()
        assert endpoints.get_url("binance", "futures") == "wss://fstream.binance.com/ws"
        assert endpoints.get_url("binance", "spot") == "wss://stream.binance.com:9443/ws"
        assert endpoints.get_url("aster", "futures") == "wss://fapi.asterdex.com/ws"
        assert endpoints.get_url("OKX", "Public") == "wss://ws.okx.com:8443/ws/v5/public"
        assert endpoints.get_url("kraken", "spot") is None

    def test_default_collector_settings(self):
        settings = FeedConfig().collector
        assert settings.default_limit == 20
        assert settings.default_duration_ms == 5000
        assert settings.decode_errors == DecodeErrorPolicy.SKIP

    def test_with_override_leaves_original_untouched(self):
        original = EndpointsConfig()
        updated = original.with_override("binance", "futures", "ws://localhost/ws")
        assert updated.get_url("binance", "futures") == "ws://localhost/ws"
        assert original.get_url("binance", "futures") == "wss://fstream.binance.com/ws"
        assert updated.get_url("okx", "public") == original.get_url("okx", "public")

    def test_load_config_without_directory(self):
        assert load_config() == FeedConfig()

    def test_load_config_log_level_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert load_config().logging.level == LogLevel.DEBUG

    def test_load_config_invalid_log_level_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ConfigLoadError, match="Invalid LOG_LEVEL"):
            load_config()


# ============================================
# Tests for ConfigLoader
# ============================================


class TestConfigLoader:
    """Tests for YAML loading and validation"""

    def test_bundled_config(self):
        config = ConfigLoader(REPO_CONFIG_DIR).load()
        assert config == FeedConfig()

    def test_partial_file_merges_over_defaults(self, tmp_path):
        write_config(
            tmp_path,
            "endpoints:\n"
            "  binance:\n"
            "    futures: ws://mirror/ws\n"
            "collector:\n"
            "  default_limit: 50\n"
            "  decode_errors: abort\n",
        )

        config = ConfigLoader(tmp_path).load()

        assert config.endpoints.get_url("binance", "futures") == "ws://mirror/ws"
        assert config.endpoints.get_url("binance", "spot") == "wss://stream.binance.com:9443/ws"
        assert config.endpoints.get_url("okx", "public") == "wss://ws.okx.com:8443/ws/v5/public"
        assert config.collector.default_limit == 50
        assert config.collector.default_duration_ms == 5000
        assert config.collector.decode_errors == DecodeErrorPolicy.ABORT

    def test_new_provider_endpoint(self, tmp_path):
        write_config(tmp_path, "endpoints:\n  testnet:\n    futures: ws://testnet/ws\n")
        config = ConfigLoader(tmp_path).load()
        assert config.endpoints.get_url("testnet", "futures") == "ws://testnet/ws"

    def test_env_directory(self, tmp_path, monkeypatch):
        write_config(tmp_path, "logging:\n  level: warning\n  format: text\n")
        monkeypatch.setenv("MARKET_FEED_CONFIG", str(tmp_path))

        config = load_config()

        assert config.logging.level == LogLevel.WARNING
        assert config.logging.format == LogFormat.TEXT

    def test_log_level_env_overrides_file(self, tmp_path, monkeypatch):
        write_config(tmp_path, "logging:\n  level: WARNING\n")
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert ConfigLoader(tmp_path).load().logging.level == LogLevel.ERROR

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="directory not found"):
            ConfigLoader(tmp_path / "absent")

    def test_path_is_a_file(self, tmp_path):
        target = tmp_path / "feeds.yaml"
        target.write_text("collector: {}\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="not a directory"):
            ConfigLoader(target)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="file not found"):
            ConfigLoader(tmp_path).load()

    def test_empty_file(self, tmp_path):
        write_config(tmp_path, "")
        with pytest.raises(ConfigLoadError, match="empty"):
            ConfigLoader(tmp_path).load()

    def test_invalid_yaml(self, tmp_path):
        write_config(tmp_path, "collector: [unclosed\n")
        with pytest.raises(ConfigLoadError, match="Invalid YAML") as exc_info:
            ConfigLoader(tmp_path).load()
        assert exc_info.value.cause is not None

    def test_non_mapping_root(self, tmp_path):
        write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigLoadError, match="must be a mapping"):
            ConfigLoader(tmp_path).load()

    @pytest.mark.parametrize(
        "text",
        [
            "collector:\n  default_limit: 0\n",
            "collector:\n  decode_errors: retry\n",
            "collector:\n  unknown_key: 1\n",
            "logging:\n  format: xml\n",
        ],
    )
    def test_invalid_values(self, tmp_path, text):
        write_config(tmp_path, text)
        with pytest.raises(ConfigLoadError, match="Invalid feed configuration"):
            ConfigLoader(tmp_path).load()

    def test_malformed_section(self, tmp_path):
        write_config(tmp_path, "endpoints: [binance]\n")
        with pytest.raises(ConfigLoadError, match="Malformed section"):
            ConfigLoader(tmp_path).load()


# ============================================
# Tests for setup_logging
# ============================================


class TestSetupLogging:
    """Smoke tests for logging configuration"""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    @pytest.mark.parametrize("fmt", ["json", "text"])
    def test_configures_structlog(self, fmt):
        setup_logging("debug", fmt)
        assert structlog.is_configured()
        assert logging.getLogger("websockets").level == logging.WARNING

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logging("chatty")
