"""
Normalized market samples and feed results.

All financial values use Decimal for precision. Fields that the provider
did not send default to zero rather than failing the message.

Models:
    Sample: One normalized market observation
    FeedStats: Statistics of a collection run
    FeedResult: Uniform result returned by every provider adapter
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from market_feed.models.stream import StopReason


class Sample(BaseModel):
    """
    A normalized market observation.

    Attributes:
        timestamp: Observation time (UTC).
        price: Last or trade price.
        best_bid: Best bid price.
        best_ask: Best ask price.
        volume: Volume figure (channel dependent; 24h volume for OKX).
        update_id: Exchange update id where the provider sends one.
        raw: The original untransformed message.

    Example:
        >>> sample = Sample(
        ...     timestamp=datetime.now(timezone.utc),
        ...     price=Decimal("50000.1"),
        ...     best_bid=Decimal("50000.0"),
        ...     best_ask=Decimal("50000.2"),
        ...     raw={"c": "50000.1"},
        ... )
        >>> sample.spread
        Decimal('0.2')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    timestamp: datetime = Field(..., description="Observation time (UTC)")
    price: Decimal = Field(default=Decimal("0"), description="Last/trade price")
    best_bid: Decimal = Field(default=Decimal("0"), description="Best bid price")
    best_ask: Decimal = Field(default=Decimal("0"), description="Best ask price")
    volume: Decimal = Field(default=Decimal("0"), description="Volume figure")
    update_id: Optional[int] = Field(default=None, description="Exchange update id")
    raw: Dict[str, Any] = Field(default_factory=dict, description="Original message")

    @property
    def timestamp_ms(self) -> int:
        """Observation time as epoch milliseconds."""
        return int(self.timestamp.timestamp() * 1000)

    @property
    def spread(self) -> Optional[Decimal]:
        """Best ask minus best bid, or None if either side is missing."""
        if self.best_bid > 0 and self.best_ask > 0:
            return self.best_ask - self.best_bid
        return None

    @property
    def mid_price(self) -> Optional[Decimal]:
        """Midpoint of best bid and ask, or None if either side is missing."""
        if self.best_bid > 0 and self.best_ask > 0:
            return (self.best_bid + self.best_ask) / 2
        return None


class FeedStats(BaseModel):
    """
    Statistics of one collection run.

    Attributes:
        count: Number of samples returned.
        duration_ms: Requested duration budget.
        stop_reason: Which stop condition ended the run.
        elapsed_ms: Measured wall time of the run.
        skipped_frames: Frames dropped because they could not be decoded.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    count: int = Field(..., ge=0)
    duration_ms: int = Field(..., gt=0)
    stop_reason: StopReason
    elapsed_ms: int = Field(default=0, ge=0)
    skipped_frames: int = Field(default=0, ge=0)


class FeedResult(BaseModel):
    """
    Uniform result of a feed collection.

    The same shape is returned for every provider and channel.

    Example:
        >>> result = await stream_binance_family(symbol="BTCUSDT", limit=5)
        >>> result.model_dump(mode="json")["stats"]["count"]
        5
    """

    model_config = {"frozen": True, "extra": "forbid"}

    provider: str = Field(..., min_length=1)
    channel: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1)
    samples: List[Sample] = Field(default_factory=list)
    stats: FeedStats
