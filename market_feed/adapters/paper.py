"""
Paper (simulated) feed adapter.

Produces a synthetic random-walk feed without opening a connection, for
offline runs and demos. The call still honours the duration budget: it
returns after duration_ms with exactly `limit` samples spread evenly over
the window.
"""

import asyncio
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional

import structlog

from market_feed.config.models import CollectorSettings
from market_feed.exceptions import FeedConfigurationError
from market_feed.interfaces.stream_adapter import StreamAdapter
from market_feed.models.sample import FeedResult, FeedStats, Sample
from market_feed.models.stream import StopReason, StreamQuery

logger = structlog.get_logger(__name__)

PRICE_STEP = Decimal("0.0001")
MIN_PRICE = Decimal("0.0001")


class PaperFeedAdapter(StreamAdapter):
    """
    Simulated feed.

    Attributes:
        start_prices: Starting mark per symbol; unknown symbols start at
            default_price.
        default_price: Starting mark for symbols without an entry.
    """

    def __init__(
        self,
        settings: Optional[CollectorSettings] = None,
        start_prices: Optional[Dict[str, float]] = None,
        default_price: float = 1000.0,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or CollectorSettings()
        self.start_prices = dict(start_prices or {})
        self.default_price = default_price
        self._rng = rng or random.Random()

    @property
    def exchange_name(self) -> str:
        """Return provider identifier."""
        return "paper"

    def _walk(self, symbol: str, count: int, start: datetime, step: timedelta) -> List[Sample]:
        last = self.start_prices.get(symbol, self.default_price)
        samples: List[Sample] = []
        for i in range(count):
            delta = (self._rng.random() - 0.5) * (last * 0.001)
            last = max(float(MIN_PRICE), last + delta)
            half_spread = 0.5 * abs(delta)
            samples.append(
                Sample(
                    timestamp=start + step * i,
                    price=Decimal(str(last)).quantize(PRICE_STEP),
                    best_bid=Decimal(str(last - half_spread)).quantize(PRICE_STEP),
                    best_ask=Decimal(str(last + half_spread)).quantize(PRICE_STEP),
                    raw={"simulated": True, "sequence": i},
                )
            )
        self.start_prices[symbol] = last
        return samples

    async def stream(self, query: StreamQuery) -> FeedResult:
        """Generate `limit` samples and wait out the duration budget."""
        if not (query.symbol or "").strip():
            raise FeedConfigurationError("paper: symbol is required")
        limit = self.settings.default_limit if query.limit is None else query.limit
        duration_ms = (
            self.settings.default_duration_ms
            if query.duration_ms is None
            else query.duration_ms
        )
        if limit <= 0:
            raise FeedConfigurationError(f"limit must be positive, got {limit}")
        if duration_ms <= 0:
            raise FeedConfigurationError(f"duration_ms must be positive, got {duration_ms}")

        symbol = query.symbol.strip()
        step = timedelta(milliseconds=duration_ms / limit)
        samples = self._walk(symbol, limit, datetime.now(timezone.utc), step)

        await asyncio.sleep(duration_ms / 1000)

        logger.info("paper_stream_completed", symbol=symbol, samples=len(samples))

        return FeedResult(
            provider=self.exchange_name,
            channel=query.channel or "simulated",
            symbol=symbol,
            samples=samples,
            stats=FeedStats(
                count=len(samples),
                duration_ms=duration_ms,
                stop_reason=StopReason.LIMIT_REACHED,
                elapsed_ms=duration_ms,
            ),
        )
