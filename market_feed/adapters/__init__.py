"""
Provider adapters for feed collection.

Each adapter turns a logical request (symbol, channel, market) into a
collection run and normalizes the provider's messages into Samples. All
adapters implement the StreamAdapter interface.

Supported providers:
    - Binance family (Binance futures, Binance spot, Aster)
    - OKX (spot and perpetual swaps)
    - Paper (simulated random walk, no connection)
"""

from market_feed.adapters.base import CollectorAdapter
from market_feed.adapters.binance import BinanceFamilyAdapter, stream_binance_family
from market_feed.adapters.okx import OKXAdapter, stream_okx
from market_feed.adapters.paper import PaperFeedAdapter

__all__ = [
    "CollectorAdapter",
    "BinanceFamilyAdapter",
    "OKXAdapter",
    "PaperFeedAdapter",
    "stream_binance_family",
    "stream_okx",
]
