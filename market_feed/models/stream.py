"""
Collection run models.

This module defines the request handed to the FeedCollector and the raw
outcome it returns, together with the enums describing how a run ended.

Models:
    StreamRequest: Configuration for one collection run
    CollectedFeed: Ordered accepted messages plus run statistics
    StopReason: Which stop condition ended the run
    FeedState: Lifecycle states of a run
    DecodeErrorPolicy: What to do with an undecodable frame
"""

from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Union

from pydantic import BaseModel, Field


class DecodeErrorPolicy(str, Enum):
    """
    Handling of frames that cannot be decoded or transformed.

    Attributes:
        SKIP: Drop the frame, count it, keep collecting
        ABORT: Fail the run with FeedDecodeError
    """

    SKIP = "skip"
    ABORT = "abort"


class StopReason(str, Enum):
    """
    Condition that ended a successful run.

    Attributes:
        LIMIT_REACHED: Buffer reached the message limit
        TIMEOUT: Duration budget elapsed
        CLOSED: Server closed the stream cleanly
    """

    LIMIT_REACHED = "limit_reached"
    TIMEOUT = "timeout"
    CLOSED = "closed"


class FeedState(str, Enum):
    """Lifecycle states of a collection run."""

    CONNECTING = "connecting"
    HANDSHAKE = "handshake"
    COLLECTING = "collecting"
    LIMIT_REACHED = "limit_reached"
    TIMEOUT = "timeout"
    CLOSED = "closed"
    CLOSING = "closing"
    DONE = "done"
    FAILED = "failed"


class StreamQuery(BaseModel):
    """
    Logical feed request handed to a provider adapter.

    Unset fields are filled by the adapter from its defaults and the
    collector settings. Zero or negative limits are kept as given so the
    adapter can reject them.

    Attributes:
        symbol: Exchange symbol without separators (e.g., "BTCUSDT").
        channel: Provider channel name; None selects the adapter default.
        interval: Kline interval (Binance family only).
        limit: Message limit.
        duration_ms: Duration budget in milliseconds.
        market: Market segment (e.g., "futures", "spot", "swap").
    """

    model_config = {"frozen": True, "extra": "forbid"}

    symbol: str = Field(default="", description="Exchange symbol")
    channel: Optional[str] = Field(default=None, description="Channel name")
    interval: Optional[str] = Field(default="1m", description="Kline interval")
    limit: Optional[int] = Field(default=None, description="Message limit")
    duration_ms: Optional[int] = Field(default=None, description="Duration budget")
    market: Optional[str] = Field(default=None, description="Market segment")


def _identity(message: Any) -> Any:
    return message


ConnectHook = Callable[[Any], Union[Awaitable[None], None]]


class StreamRequest(BaseModel):
    """
    Configuration for one collection run.

    Built fresh by an adapter for every call. Holds no shared state.

    Attributes:
        target: WebSocket URL to connect to.
        message_limit: Maximum number of accepted messages.
        duration_ms: Wall-clock budget measured from connection establishment.
        on_connect: Called once with the live connection (sync or async),
            typically to send a subscription message.
        transform: Maps one decoded frame to a structured message.
        should_include: Predicate over transformed messages; None accepts all.
        decode_errors: Policy for frames that fail to decode.

    Example:
        >>> request = StreamRequest(
        ...     target="wss://fstream.binance.com/ws/btcusdt@bookTicker",
        ...     message_limit=10,
        ...     duration_ms=3000,
        ... )
    """

    model_config = {"frozen": True, "extra": "forbid", "arbitrary_types_allowed": True}

    target: str = Field(..., min_length=1, description="WebSocket URL")
    message_limit: int = Field(..., description="Maximum accepted messages")
    duration_ms: int = Field(..., description="Wall-clock budget in milliseconds")
    on_connect: Optional[ConnectHook] = Field(
        default=None,
        description="Hook invoked once the connection is open",
    )
    transform: Callable[[Any], Any] = Field(
        default=_identity,
        description="Frame -> message transform",
    )
    should_include: Optional[Callable[[Any], bool]] = Field(
        default=None,
        description="Inclusion predicate over transformed messages",
    )
    decode_errors: DecodeErrorPolicy = Field(
        default=DecodeErrorPolicy.SKIP,
        description="Policy for undecodable frames",
    )

    def includes(self, message: Any) -> bool:
        """Apply the inclusion predicate (accept-all when unset)."""
        if self.should_include is None:
            return True
        return bool(self.should_include(message))


class CollectedFeed(BaseModel):
    """
    Raw outcome of a collection run.

    Attributes:
        messages: Accepted messages in arrival order.
        stop_reason: Which condition ended the run.
        elapsed_ms: Wall time from connection establishment to teardown.
        skipped_frames: Frames dropped under DecodeErrorPolicy.SKIP.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    messages: List[Any] = Field(default_factory=list)
    stop_reason: StopReason
    elapsed_ms: int = Field(default=0, ge=0)
    skipped_frames: int = Field(default=0, ge=0)

    @property
    def count(self) -> int:
        """Number of accepted messages."""
        return len(self.messages)
