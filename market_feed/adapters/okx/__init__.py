"""
OKX adapter module.

Streams bounded feeds from OKX public channels for spot and perpetual swap
instruments.

Components:
    OKXAdapter: Stream adapter (subscription and flattening)
    OKXNormalizer: Instrument id derivation and entry normalization
    stream_okx: One-call convenience wrapper

Example:
    >>> from market_feed.adapters.okx import stream_okx
    >>> result = await stream_okx(symbol="BTCUSDT", market="swap", limit=10)
"""

from market_feed.adapters.okx.adapter import OKXAdapter, stream_okx
from market_feed.adapters.okx.normalizer import OKXNormalizer

__all__ = [
    "OKXAdapter",
    "OKXNormalizer",
    "stream_okx",
]
