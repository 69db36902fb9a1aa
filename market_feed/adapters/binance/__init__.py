"""
Binance-family adapter module.

Streams bounded feeds from Binance futures, Binance spot and Aster, which
share the Binance WebSocket wire format.

Components:
    BinanceFamilyAdapter: Stream adapter (endpoint and stream name resolution)
    BinanceNormalizer: Event -> Sample normalization
    stream_binance_family: One-call convenience wrapper

Example:
    >>> from market_feed.adapters.binance import stream_binance_family
    >>> result = await stream_binance_family(symbol="ETHUSDT", channel="kline", interval="5m")
"""

from market_feed.adapters.binance.adapter import (
    MARKET_VENUES,
    BinanceFamilyAdapter,
    stream_binance_family,
)
from market_feed.adapters.binance.normalizer import BinanceNormalizer

__all__ = [
    "BinanceFamilyAdapter",
    "BinanceNormalizer",
    "MARKET_VENUES",
    "stream_binance_family",
]
