"""
Binance-family stream adapter.

Covers Binance futures, Binance spot and Aster (a futures venue that
speaks the Binance wire format). The stream name is embedded in the
connection path, so no subscription message is sent:

    <base>/<symbol>@<channel>        e.g. wss://fstream.binance.com/ws/btcusdt@bookTicker
    <base>/<symbol>@kline_<interval> e.g. wss://fstream.binance.com/ws/ethusdt@kline_5m

Markets:
    futures (default) -> binance futures endpoint
    spot              -> binance spot endpoint
    aster             -> aster futures endpoint, reported as provider "aster"

Example:
    >>> result = await stream_binance_family(symbol="BTCUSDT", limit=10)
    >>> result.provider, result.channel
    ('binance', 'bookTicker')
"""

from typing import Any, List, Optional

import structlog

from market_feed.adapters.base import CollectorAdapter, build_query
from market_feed.adapters.binance.normalizer import BinanceNormalizer
from market_feed.config.models import CollectorSettings, EndpointsConfig
from market_feed.exceptions import FeedConfigurationError
from market_feed.feed.collector import FeedCollector
from market_feed.models.sample import FeedResult, Sample
from market_feed.models.stream import StreamQuery

logger = structlog.get_logger(__name__)

# market -> (venue, endpoint segment)
MARKET_VENUES = {
    "futures": ("binance", "futures"),
    "spot": ("binance", "spot"),
    "aster": ("aster", "futures"),
}


class BinanceFamilyAdapter(CollectorAdapter):
    """
    Stream adapter for Binance-compatible venues.

    Attributes:
        endpoint_override: Base URL used instead of the configured endpoint
            (for tests or additional Binance-compatible venues).

    Example:
        >>> adapter = BinanceFamilyAdapter()
        >>> adapter.resolve_target(
        ...     adapter.prepare(StreamQuery(symbol="BTCUSDT", market="spot"))
        ... )
        'wss://stream.binance.com:9443/ws/btcusdt@bookTicker'
    """

    default_channel = BinanceNormalizer.DEFAULT_CHANNEL
    default_market = "futures"

    def __init__(
        self,
        endpoints: Optional[EndpointsConfig] = None,
        collector: Optional[FeedCollector] = None,
        settings: Optional[CollectorSettings] = None,
        endpoint_override: Optional[str] = None,
        market: Optional[str] = None,
    ):
        """
        Initialize adapter.

        Args:
            endpoints: Endpoint map.
            collector: Collector to run requests with.
            settings: Collector settings.
            endpoint_override: Base URL replacing the configured endpoint.
            market: Market used when a query does not name one.
        """
        super().__init__(endpoints=endpoints, collector=collector, settings=settings)
        self.endpoint_override = endpoint_override
        if market:
            self.default_market = market.lower()

    @property
    def exchange_name(self) -> str:
        """Return provider identifier for the default market."""
        return MARKET_VENUES.get(self.default_market, ("binance", ""))[0]

    def prepare(self, query: StreamQuery) -> StreamQuery:
        """Validate the query; also rejects unknown markets."""
        query = super().prepare(query)
        if query.market not in MARKET_VENUES:
            raise FeedConfigurationError(
                f"Unknown Binance-family market '{query.market}'. "
                f"Allowed markets: {', '.join(sorted(MARKET_VENUES))}"
            )
        return query

    def provider_for(self, query: StreamQuery) -> str:
        """Resolved venue name (binance or aster)."""
        return MARKET_VENUES[query.market][0]

    def resolve_base_url(self, market: str) -> str:
        """
        Resolve the base WebSocket URL for a market.

        Raises:
            FeedConfigurationError: If no endpoint is configured.
        """
        if self.endpoint_override:
            return self.endpoint_override.rstrip("/")

        venue, segment = MARKET_VENUES[market]
        url = self.endpoints.get_url(venue, segment)
        if not url:
            raise FeedConfigurationError(f"No endpoint configured for {venue}/{segment}")
        return url.rstrip("/")

    def resolve_target(self, query: StreamQuery) -> str:
        """Return <base>/<stream name>."""
        stream = BinanceNormalizer.stream_name(query.symbol, query.channel, query.interval)
        return f"{self.resolve_base_url(query.market)}/{stream}"

    def transform(self, message: Any) -> Sample:
        """Unwrap and normalize one event; raw keeps the frame as received."""
        return BinanceNormalizer.normalize_event(BinanceNormalizer.unwrap(message), raw=message)

    def to_samples(self, messages: List[Any]) -> List[Sample]:
        """Messages are already samples; one per frame."""
        return list(messages)


async def stream_binance_family(
    symbol: str,
    channel: Optional[str] = "bookTicker",
    interval: Optional[str] = "1m",
    limit: Optional[int] = 20,
    duration_ms: Optional[int] = 5000,
    market: str = "futures",
    endpoint_override: Optional[str] = None,
    endpoints: Optional[EndpointsConfig] = None,
    collector: Optional[FeedCollector] = None,
) -> FeedResult:
    """
    Collect a bounded feed from a Binance-family venue.

    Args:
        symbol: Symbol (e.g., "BTCUSDT"); lower-cased for the stream name.
        channel: ticker, trade, kline, miniTicker or bookTicker.
        interval: Kline interval (kline channel only).
        limit: Maximum number of samples.
        duration_ms: Duration budget in milliseconds.
        market: futures, spot or aster.
        endpoint_override: Base URL replacing the configured endpoint.
        endpoints: Endpoint map.
        collector: Collector to use.

    Returns:
        FeedResult: One sample per received event.

    Raises:
        FeedConfigurationError: Invalid symbol, limits or market.
        FeedConnectionError: Connection failure.
    """
    adapter = BinanceFamilyAdapter(
        endpoints=endpoints,
        collector=collector,
        endpoint_override=endpoint_override,
    )
    return await adapter.stream(
        build_query(
            symbol=symbol,
            channel=channel,
            interval=interval,
            limit=limit,
            duration_ms=duration_ms,
            market=market,
        )
    )
