"""
OKX stream adapter.

OKX serves every public channel from one endpoint. After connecting, the
adapter sends a subscription:

    {"op": "subscribe", "args": [{"channel": "tickers", "instId": "BTC-USDT-SWAP"}]}

Only envelopes with a non-empty data array count toward the message limit;
subscription acknowledgements and control frames are ignored. The accepted
envelopes are flattened into one sample per data entry.

Example:
    >>> result = await stream_okx(symbol="ETHUSDT", market="spot", limit=5)
    >>> result.provider
    'okx'
"""

from typing import Any, Dict, List, Optional

import structlog

from market_feed.adapters.base import CollectorAdapter, build_query
from market_feed.adapters.okx.normalizer import OKXNormalizer
from market_feed.config.models import CollectorSettings, EndpointsConfig
from market_feed.exceptions import FeedConfigurationError
from market_feed.feed.collector import FeedCollector
from market_feed.models.sample import FeedResult, Sample
from market_feed.models.stream import StreamQuery

logger = structlog.get_logger(__name__)


class OKXAdapter(CollectorAdapter):
    """
    Stream adapter for OKX public channels.

    Example:
        >>> adapter = OKXAdapter()
        >>> adapter.build_handshake(adapter.prepare(StreamQuery(symbol="BTCUSDT")))
        {'op': 'subscribe', 'args': [{'channel': 'tickers', 'instId': 'BTC-USDT-SWAP'}]}
    """

    default_channel = "tickers"
    default_market = "swap"

    def __init__(
        self,
        endpoints: Optional[EndpointsConfig] = None,
        collector: Optional[FeedCollector] = None,
        settings: Optional[CollectorSettings] = None,
        market: Optional[str] = None,
    ):
        """
        Initialize adapter.

        Args:
            endpoints: Endpoint map.
            collector: Collector to run requests with.
            settings: Collector settings.
            market: Market used when a query does not name one.
        """
        super().__init__(endpoints=endpoints, collector=collector, settings=settings)
        if market:
            self.default_market = market.lower()

    @property
    def exchange_name(self) -> str:
        """Return exchange identifier."""
        return "okx"

    def resolve_target(self, query: StreamQuery) -> str:
        """
        Return the public endpoint.

        Raises:
            FeedConfigurationError: If no endpoint is configured.
        """
        url = self.endpoints.get_url("okx", "public")
        if not url:
            raise FeedConfigurationError("No endpoint configured for okx/public")
        return url

    def build_handshake(self, query: StreamQuery) -> Dict[str, Any]:
        """Subscribe to the requested channel for the derived instrument."""
        inst_id = OKXNormalizer.instrument_id(query.symbol, query.market)
        return OKXNormalizer.subscription(query.channel, inst_id)

    def transform(self, message: Any) -> Any:
        """Envelopes are kept as-is until flattening."""
        return message

    def should_include(self, message: Any) -> bool:
        """Accept only envelopes with a non-empty data array."""
        return OKXNormalizer.has_data(message)

    def to_samples(self, messages: List[Any]) -> List[Sample]:
        """Flatten accepted envelopes."""
        return OKXNormalizer.flatten(messages)


async def stream_okx(
    symbol: str,
    channel: Optional[str] = "tickers",
    limit: Optional[int] = 20,
    duration_ms: Optional[int] = 5000,
    market: str = "swap",
    endpoints: Optional[EndpointsConfig] = None,
    collector: Optional[FeedCollector] = None,
) -> FeedResult:
    """
    Collect a bounded feed from OKX.

    Args:
        symbol: Bare symbol (e.g., "ETHUSDT").
        channel: OKX channel name (default "tickers").
        limit: Maximum number of data envelopes to collect.
        duration_ms: Duration budget in milliseconds.
        market: "spot" or a derivative market (default "swap").
        endpoints: Endpoint map.
        collector: Collector to use.

    Returns:
        FeedResult: Flattened samples; stats.count is the flattened count.

    Raises:
        FeedConfigurationError: Invalid symbol or limits.
        FeedConnectionError: Connection or subscription failure.
    """
    adapter = OKXAdapter(endpoints=endpoints, collector=collector)
    return await adapter.stream(
        build_query(
            symbol=symbol,
            channel=channel,
            limit=limit,
            duration_ms=duration_ms,
            market=market,
        )
    )
