"""
Collector-backed adapter base.

Provider adapters that read a live WebSocket feed differ only in a handful
of strategy hooks:

    resolve_target   - connection URL for the query
    build_handshake  - optional subscription payload sent after connect
    transform        - frame -> message
    should_include   - which messages count toward the limit
    to_samples       - accepted messages -> Sample list (flattening)

CollectorAdapter.stream() wires these into a StreamRequest, runs the
shared FeedCollector and assembles the FeedResult.
"""

import json
from abc import abstractmethod
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from market_feed.config.models import CollectorSettings, EndpointsConfig
from market_feed.exceptions import FeedConfigurationError
from market_feed.feed.collector import FeedCollector
from market_feed.interfaces.stream_adapter import StreamAdapter
from market_feed.models.sample import FeedResult, FeedStats, Sample
from market_feed.models.stream import ConnectHook, StreamQuery, StreamRequest

logger = structlog.get_logger(__name__)


def build_query(**fields: Any) -> StreamQuery:
    """
    Build a StreamQuery from caller arguments.

    Raises:
        FeedConfigurationError: If an argument is missing or has the wrong type.
    """
    try:
        return StreamQuery(**fields)
    except ValidationError as e:
        raise FeedConfigurationError(f"Invalid stream parameters: {e}") from e


def send_json(payload: Dict[str, Any]) -> ConnectHook:
    """Build an on_connect hook that sends payload as one JSON text frame."""

    async def _send(ws: Any) -> None:
        await ws.send(json.dumps(payload))

    return _send


class CollectorAdapter(StreamAdapter):
    """
    Base class for adapters that collect through FeedCollector.

    Subclasses set default_channel / default_market and implement the
    strategy hooks.
    """

    default_channel: str = ""
    default_market: str = ""

    def __init__(
        self,
        endpoints: Optional[EndpointsConfig] = None,
        collector: Optional[FeedCollector] = None,
        settings: Optional[CollectorSettings] = None,
    ):
        """
        Initialize adapter.

        Args:
            endpoints: Endpoint map. Defaults to the built-in endpoints.
            collector: Collector to run requests with. Defaults to a new
                FeedCollector built from settings.
            settings: Collector settings (defaults and decode policy).
        """
        self.settings = settings or (collector.settings if collector else CollectorSettings())
        self.endpoints = endpoints or EndpointsConfig()
        self.collector = collector or FeedCollector(self.settings)

    def prepare(self, query: StreamQuery) -> StreamQuery:
        """
        Validate the query and fill in defaults.

        Raises:
            FeedConfigurationError: If the symbol is missing or a limit is
                not positive.
        """
        symbol = (query.symbol or "").strip()
        if not symbol:
            raise FeedConfigurationError(f"{self.exchange_name}: symbol is required")

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

        return query.model_copy(
            update={
                "symbol": symbol,
                "channel": query.channel or self.default_channel,
                "interval": query.interval or "1m",
                "limit": limit,
                "duration_ms": duration_ms,
                "market": (query.market or self.default_market).lower(),
            }
        )

    def provider_for(self, query: StreamQuery) -> str:
        """Provider name reported in the FeedResult."""
        return self.exchange_name

    @abstractmethod
    def resolve_target(self, query: StreamQuery) -> str:
        """Return the connection URL for a prepared query."""
        pass

    def build_handshake(self, query: StreamQuery) -> Optional[Dict[str, Any]]:
        """Return the subscription payload, or None if none is needed."""
        return None

    @abstractmethod
    def transform(self, message: Any) -> Any:
        """Map one decoded frame to a message."""
        pass

    def should_include(self, message: Any) -> bool:
        """Decide whether a message is buffered. Accepts all by default."""
        return True

    @abstractmethod
    def to_samples(self, messages: List[Any]) -> List[Sample]:
        """Convert accepted messages to samples, preserving order."""
        pass

    def build_request(self, query: StreamQuery) -> StreamRequest:
        """Build the StreamRequest for a prepared query."""
        handshake = self.build_handshake(query)
        return StreamRequest(
            target=self.resolve_target(query),
            message_limit=query.limit,
            duration_ms=query.duration_ms,
            on_connect=send_json(handshake) if handshake is not None else None,
            transform=self.transform,
            should_include=self.should_include,
            decode_errors=self.settings.decode_errors,
        )

    async def stream(self, query: StreamQuery) -> FeedResult:
        """Collect one bounded feed (see StreamAdapter.stream)."""
        query = self.prepare(query)
        request = self.build_request(query)
        provider = self.provider_for(query)

        logger.info(
            "stream_started",
            provider=provider,
            symbol=query.symbol,
            channel=query.channel,
            market=query.market,
            target=request.target,
        )

        feed = await self.collector.collect(request)
        samples = self.to_samples(feed.messages)

        logger.info(
            "stream_completed",
            provider=provider,
            symbol=query.symbol,
            messages=feed.count,
            samples=len(samples),
            stop_reason=feed.stop_reason.value,
        )

        return FeedResult(
            provider=provider,
            channel=query.channel,
            symbol=query.symbol,
            samples=samples,
            stats=FeedStats(
                count=len(samples),
                duration_ms=query.duration_ms,
                stop_reason=feed.stop_reason,
                elapsed_ms=feed.elapsed_ms,
                skipped_frames=feed.skipped_frames,
            ),
        )
