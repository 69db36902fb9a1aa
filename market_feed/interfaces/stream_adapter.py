"""
Abstract base class for stream adapters.

This module defines the StreamAdapter interface that every provider
implementation (Binance family, OKX, paper) follows, so callers can collect
a bounded feed from any provider through one call and get the same
FeedResult shape back.

The adapter pattern allows the system to:
- Add new exchanges without modifying the collector
- Normalize data into one schema (Sample / FeedResult)
- Keep exchange-specific endpoint, stream naming and handshake details
  out of the collection loop

Example:
    >>> class MyAdapter(StreamAdapter):
    ...     @property
    ...     def exchange_name(self) -> str:
    ...         return "my-exchange"
    ...
    ...     async def stream(self, query: StreamQuery) -> FeedResult:
    ...         ...
"""

from abc import ABC, abstractmethod

from market_feed.models.sample import FeedResult
from market_feed.models.stream import StreamQuery


class StreamAdapter(ABC):
    """
    Abstract base class for stream adapters.

    Attributes:
        exchange_name: Lowercase provider identifier (e.g., "binance", "okx").
    """

    @property
    @abstractmethod
    def exchange_name(self) -> str:
        """
        Return the lowercase provider identifier.

        Returns:
            str: Provider name (e.g., "binance", "okx").
        """
        pass

    @abstractmethod
    async def stream(self, query: StreamQuery) -> FeedResult:
        """
        Collect one bounded feed.

        Runs a single collection window: the call returns once the message
        limit is reached or the duration budget elapses, whichever comes
        first.

        Args:
            query: Logical request (symbol, channel, limits, market).

        Returns:
            FeedResult: Samples in arrival order and run statistics.

        Raises:
            FeedConfigurationError: If the query is invalid. Raised before
                any connection attempt.
            FeedConnectionError: If the connection cannot be established or
                the subscription cannot be sent.

        Example:
            >>> result = await adapter.stream(StreamQuery(symbol="BTCUSDT", limit=5))
            >>> len(result.samples) <= 5
            True
        """
        pass

    def __repr__(self) -> str:
        """Return string representation of adapter."""
        return f"{self.__class__.__name__}(exchange={self.exchange_name})"
