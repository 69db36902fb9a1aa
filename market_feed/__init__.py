"""
Market Feed.

Bounded real-time market data collection from crypto exchange WebSocket
feeds. One call opens a connection, subscribes if the exchange needs it,
collects until a message limit or a duration budget is hit, closes the
connection and returns a uniform FeedResult.

This package provides:
- FeedCollector: the connection/collection primitive
- Provider adapters for the Binance family (Binance, Aster) and OKX
- A provider registry and the run_stream action
- Configuration and structured logging setup
"""

from market_feed.adapters.binance import stream_binance_family
from market_feed.adapters.okx import stream_okx
from market_feed.exceptions import (
    FeedConfigurationError,
    FeedConnectionError,
    FeedDecodeError,
    FeedError,
)
from market_feed.feed.collector import FeedCollector
from market_feed.models import FeedResult, FeedStats, Sample, StreamQuery, StreamRequest
from market_feed.registry import StreamOptions, create_default_registry, run_stream

__version__ = "0.1.0"

__all__ = [
    "FeedCollector",
    "FeedResult",
    "FeedStats",
    "Sample",
    "StreamQuery",
    "StreamRequest",
    "StreamOptions",
    "create_default_registry",
    "run_stream",
    "stream_binance_family",
    "stream_okx",
    "FeedError",
    "FeedConfigurationError",
    "FeedConnectionError",
    "FeedDecodeError",
]
