"""
Feed collector.

Protocol-agnostic primitive that manages one WebSocket connection for one
collection run: connect, optional handshake, message accumulation under a
dual stop condition, guaranteed teardown.

Run lifecycle:
    CONNECTING -> (HANDSHAKE) -> COLLECTING -> (LIMIT_REACHED | TIMEOUT | CLOSED)
    -> CLOSING -> DONE

    FAILED is reached from CONNECTING, HANDSHAKE or COLLECTING on a
    connection-level error. The connection, once open, is closed exactly
    once on every path.

Stop conditions:
    - Buffer length reaches message_limit
    - duration_ms elapses since the connection was established

    The deadline bounds every wait for the next frame, so a silent stream
    cannot hold the run open past its budget. A run that ends on the
    deadline with zero or partial messages is a successful result.

Example:
    >>> collector = FeedCollector()
    >>> feed = await collector.collect(
    ...     StreamRequest(
    ...         target="wss://fstream.binance.com/ws/btcusdt@bookTicker",
    ...         message_limit=10,
    ...         duration_ms=3000,
    ...     )
    ... )
    >>> print(feed.stop_reason, feed.count)
"""

import asyncio
import inspect
import json
from typing import Any, Callable, List, Optional

import structlog
import websockets
from websockets.exceptions import (
    ConnectionClosedError,
    ConnectionClosedOK,
    WebSocketException,
)

from market_feed.config.models import CollectorSettings
from market_feed.exceptions import (
    FeedConfigurationError,
    FeedConnectionError,
    FeedDecodeError,
)
from market_feed.models.stream import (
    CollectedFeed,
    DecodeErrorPolicy,
    FeedState,
    StopReason,
    StreamRequest,
)

logger = structlog.get_logger(__name__)

ConnectFactory = Callable[..., Any]


def validate_request(request: StreamRequest) -> None:
    """
    Reject requests that can never produce a valid run.

    Raises:
        FeedConfigurationError: If message_limit or duration_ms is not positive.
    """
    if request.message_limit <= 0:
        raise FeedConfigurationError(
            f"message_limit must be positive, got {request.message_limit}"
        )
    if request.duration_ms <= 0:
        raise FeedConfigurationError(
            f"duration_ms must be positive, got {request.duration_ms}"
        )


def decode_frame(frame: Any) -> Any:
    """
    Decode one inbound frame into a structured value.

    Text frames are parsed as JSON. Binary frames are UTF-8 decoded first.
    Anything else is passed through unchanged.

    Raises:
        FeedDecodeError: If the frame is not valid UTF-8 or JSON.
    """
    if isinstance(frame, (bytes, bytearray, memoryview)):
        try:
            frame = bytes(frame).decode("utf-8")
        except UnicodeDecodeError as e:
            raise FeedDecodeError(f"Binary frame is not UTF-8: {e}") from e

    if isinstance(frame, str):
        try:
            return json.loads(frame)
        except json.JSONDecodeError as e:
            raise FeedDecodeError(f"Invalid JSON frame: {e}", frame=frame[:100]) from e

    return frame


class FeedCollector:
    """
    Collects messages from one streaming connection per call.

    The collector keeps no per-run state, so one instance can serve any
    number of concurrent collect() calls.

    Attributes:
        settings: Connection settings (timeouts, max frame size).
    """

    def __init__(
        self,
        settings: Optional[CollectorSettings] = None,
        connect: Optional[ConnectFactory] = None,
    ):
        """
        Initialize collector.

        Args:
            settings: Connection settings. Defaults to CollectorSettings().
            connect: Connection factory, awaited with the target URL and
                websockets keyword arguments. Defaults to websockets.connect.
        """
        self.settings = settings or CollectorSettings()
        self._connect = connect or websockets.connect

    async def collect(self, request: StreamRequest) -> CollectedFeed:
        """
        Run one collection.

        Args:
            request: Run configuration.

        Returns:
            CollectedFeed: Accepted messages in arrival order with run stats.

        Raises:
            FeedConfigurationError: If the request is invalid (before connecting).
            FeedConnectionError: If connecting, the handshake, or the stream fails.
            FeedDecodeError: If a frame is undecodable and the policy is ABORT.
        """
        validate_request(request)
        log = logger.bind(target=request.target)

        log.debug("feed_state_changed", state=FeedState.CONNECTING.value)
        ws = await self._open(request.target)

        loop = asyncio.get_running_loop()
        connected_at = loop.time()
        deadline = connected_at + request.duration_ms / 1000
        log.info(
            "feed_connected",
            message_limit=request.message_limit,
            duration_ms=request.duration_ms,
        )

        messages: List[Any] = []
        skipped = 0
        stop_reason = StopReason.TIMEOUT
        try:
            if request.on_connect is not None:
                log.debug("feed_state_changed", state=FeedState.HANDSHAKE.value)
                await self._handshake(ws, request)

            log.debug("feed_state_changed", state=FeedState.COLLECTING.value)
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    stop_reason = StopReason.TIMEOUT
                    break

                try:
                    frame = await asyncio.wait_for(ws.recv(), timeout=remaining)
                except asyncio.TimeoutError:
                    stop_reason = StopReason.TIMEOUT
                    break
                except ConnectionClosedOK:
                    stop_reason = StopReason.CLOSED
                    break
                except ConnectionClosedError as e:
                    log.error("feed_connection_lost", error=str(e))
                    raise FeedConnectionError(
                        f"Connection to {request.target} closed abnormally: {e}",
                        target=request.target,
                        cause=e,
                    ) from e

                try:
                    message = request.transform(decode_frame(frame))
                    included = request.includes(message)
                except (FeedDecodeError, ValueError, TypeError, KeyError) as e:
                    if request.decode_errors == DecodeErrorPolicy.ABORT:
                        log.error("feed_frame_rejected", error=str(e))
                        if isinstance(e, FeedDecodeError):
                            raise
                        raise FeedDecodeError(f"Frame transform failed: {e}") from e
                    skipped += 1
                    log.warning("feed_frame_skipped", error=str(e), skipped=skipped)
                    continue

                if not included:
                    continue

                messages.append(message)
                if len(messages) >= request.message_limit:
                    stop_reason = StopReason.LIMIT_REACHED
                    break

            log.debug("feed_state_changed", state=stop_reason.value)

        except BaseException:
            log.debug("feed_state_changed", state=FeedState.FAILED.value)
            raise

        finally:
            log.debug("feed_state_changed", state=FeedState.CLOSING.value)
            await self._close(ws, request.target)

        elapsed_ms = int((loop.time() - connected_at) * 1000)
        log.info(
            "feed_collection_finished",
            stop_reason=stop_reason.value,
            count=len(messages),
            skipped_frames=skipped,
            elapsed_ms=elapsed_ms,
        )
        log.debug("feed_state_changed", state=FeedState.DONE.value)

        return CollectedFeed(
            messages=messages,
            stop_reason=stop_reason,
            elapsed_ms=elapsed_ms,
            skipped_frames=skipped,
        )

    async def _open(self, target: str) -> Any:
        """
        Open the WebSocket connection.

        Raises:
            FeedConnectionError: If the connection cannot be established.
        """
        try:
            return await self._connect(
                target,
                open_timeout=self.settings.open_timeout_seconds,
                close_timeout=self.settings.close_timeout_seconds,
                max_size=self.settings.max_message_bytes,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            logger.error(
                "feed_connection_failed",
                target=target,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise FeedConnectionError(
                f"Failed to connect to {target}: {e}",
                target=target,
                cause=e,
            ) from e

    async def _handshake(self, ws: Any, request: StreamRequest) -> None:
        """
        Invoke the on_connect hook.

        Raises:
            FeedConnectionError: If the hook fails to send its payload.
        """
        try:
            result = request.on_connect(ws)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                "feed_handshake_failed",
                target=request.target,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise FeedConnectionError(
                f"Handshake with {request.target} failed: {e}",
                target=request.target,
                cause=e,
            ) from e

        logger.debug("feed_handshake_sent", target=request.target)

    async def _close(self, ws: Any, target: str) -> None:
        """Close the connection. Close failures are logged, not raised."""
        try:
            await ws.close()
            logger.debug("feed_disconnected", target=target)
        except Exception as e:
            logger.warning("feed_close_error", target=target, error=str(e))

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"FeedCollector(open_timeout={self.settings.open_timeout_seconds}, "
            f"max_size={self.settings.max_message_bytes})"
        )
