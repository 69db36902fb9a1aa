"""
Provider registry and the stream action.

Maps provider names to adapter factories so callers can pick a provider by
name (e.g., from their own configuration) and run one bounded collection:

    >>> report = await run_stream("BTCUSDT", provider="okx", options=StreamOptions(limit=5))
    >>> report.stream.stats.count <= 5
    True
"""

from __future__ import annotations

from typing import Callable, Dict, Literal, Optional

import structlog
from pydantic import BaseModel, Field

from market_feed.adapters.base import build_query
from market_feed.adapters.binance.adapter import BinanceFamilyAdapter
from market_feed.adapters.okx.adapter import OKXAdapter
from market_feed.adapters.paper import PaperFeedAdapter
from market_feed.config.models import FeedConfig
from market_feed.exceptions import FeedConfigurationError
from market_feed.feed.collector import FeedCollector
from market_feed.interfaces.stream_adapter import StreamAdapter
from market_feed.models.sample import FeedResult

logger = structlog.get_logger(__name__)

AdapterFactory = Callable[[FeedConfig, Optional[FeedCollector]], StreamAdapter]


class StreamOptions(BaseModel):
    """Options of the stream action. Unset values use adapter defaults."""

    model_config = {"frozen": True, "extra": "forbid"}

    channel: Optional[str] = Field(default=None, description="Channel name")
    interval: Optional[str] = Field(default="1m", description="Kline interval")
    limit: Optional[int] = Field(default=None, description="Message limit")
    duration_ms: Optional[int] = Field(default=None, description="Duration budget")


class StreamMetadata(BaseModel):
    """Effective parameters of a stream action."""

    model_config = {"frozen": True, "extra": "forbid"}

    provider: str
    channel: str
    message_limit: int
    duration_ms: int


class StreamReport(BaseModel):
    """Outcome of the stream action."""

    model_config = {"frozen": True, "extra": "forbid"}

    status: Literal["streamed"] = "streamed"
    stream: FeedResult
    metadata: StreamMetadata


class ProviderRegistry:
    """Registry of stream adapter factories keyed by provider name."""

    def __init__(self) -> None:
        self._factories: Dict[str, AdapterFactory] = {}

    def register(self, provider: str, factory: AdapterFactory, *, replace: bool = False) -> None:
        key = _normalize_provider(provider)
        if not replace and key in self._factories:
            raise FeedConfigurationError(f"Feed provider '{key}' already registered")
        self._factories[key] = factory

    def providers(self) -> list[str]:
        return sorted(self._factories.keys())

    def create(
        self,
        provider: str,
        config: Optional[FeedConfig] = None,
        collector: Optional[FeedCollector] = None,
    ) -> StreamAdapter:
        key = _normalize_provider(provider)
        factory = self._factories.get(key)
        if factory is None:
            allowed = ", ".join(self.providers()) or "<none>"
            raise FeedConfigurationError(
                f"Unknown feed provider '{key}'. Allowed providers: {allowed}"
            )
        return factory(config or FeedConfig(), collector)


def _normalize_provider(value: Optional[str]) -> str:
    key = str(value or "").strip().lower()
    if not key:
        raise FeedConfigurationError("Feed provider cannot be empty")
    return key


def _binance_factory(market: str) -> AdapterFactory:
    def build(config: FeedConfig, collector: Optional[FeedCollector]) -> StreamAdapter:
        return BinanceFamilyAdapter(
            endpoints=config.endpoints,
            collector=collector,
            settings=config.collector,
            market=market,
        )

    return build


def _okx_factory(market: str) -> AdapterFactory:
    def build(config: FeedConfig, collector: Optional[FeedCollector]) -> StreamAdapter:
        return OKXAdapter(
            endpoints=config.endpoints,
            collector=collector,
            settings=config.collector,
            market=market,
        )

    return build


def _paper_factory(config: FeedConfig, collector: Optional[FeedCollector]) -> StreamAdapter:
    return PaperFeedAdapter(settings=config.collector)


def create_default_registry() -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register("binance", _binance_factory("futures"))
    registry.register("binance-spot", _binance_factory("spot"))
    registry.register("aster", _binance_factory("aster"))
    registry.register("okx", _okx_factory("swap"))
    registry.register("okx-spot", _okx_factory("spot"))
    registry.register("paper", _paper_factory)
    return registry


async def run_stream(
    symbol: str,
    provider: str = "binance",
    options: Optional[StreamOptions] = None,
    registry: Optional[ProviderRegistry] = None,
    config: Optional[FeedConfig] = None,
    collector: Optional[FeedCollector] = None,
) -> StreamReport:
    """
    Run one bounded collection through a named provider.

    Args:
        symbol: Exchange symbol (e.g., "BTCUSDT").
        provider: Registered provider name.
        options: Channel, interval and limits.
        registry: Provider registry. Defaults to create_default_registry().
        config: Endpoints and collector settings.
        collector: Collector shared by collector-backed adapters.

    Returns:
        StreamReport: The FeedResult plus the effective parameters.

    Raises:
        FeedConfigurationError: Unknown provider or invalid options.
        FeedConnectionError: Connection failure.
    """
    options = options or StreamOptions()
    registry = registry or create_default_registry()
    adapter = registry.create(provider, config=config, collector=collector)

    result = await adapter.stream(
        build_query(
            symbol=symbol,
            channel=options.channel,
            interval=options.interval,
            limit=options.limit,
            duration_ms=options.duration_ms,
        )
    )

    settings = (config or FeedConfig()).collector
    return StreamReport(
        stream=result,
        metadata=StreamMetadata(
            provider=_normalize_provider(provider),
            channel=result.channel,
            message_limit=settings.default_limit if options.limit is None else options.limit,
            duration_ms=result.stats.duration_ms,
        ),
    )
