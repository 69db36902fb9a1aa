"""
Abstract interfaces for feed collection.

The key interface is StreamAdapter, which defines the contract for all
provider-specific implementations (Binance family, OKX, paper).

Example:
    >>> from market_feed.interfaces import StreamAdapter

Modules:
    stream_adapter: StreamAdapter ABC for provider integrations
"""

from market_feed.interfaces.stream_adapter import StreamAdapter

__all__: list[str] = [
    "StreamAdapter",
]
