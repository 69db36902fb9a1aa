"""
Binance data normalizer.

Converts Binance-family stream events (Binance futures, Binance spot and
Aster, which shares the wire format) into Sample models.

Binance Book Ticker Format:
    {
        "e": "bookTicker",       // futures only
        "u": 400900217,          // order book updateId
        "E": 1568014460893,      // event time (futures only)
        "s": "BNBUSDT",
        "b": "25.35190000",      // best bid price
        "B": "31.21000000",
        "a": "25.36520000",      // best ask price
        "A": "40.66000000"
    }

Binance 24hr Ticker Format:
    {
        "e": "24hrTicker",
        "E": 1672515782136,
        "s": "BNBUSDT",
        "c": "0.0025",           // last price
        "b": "0.0024",           // best bid (spot only)
        "a": "0.0026",           // best ask (spot only)
        "v": "10000",            // base asset volume
        ...
    }

Binance Trade Format:
    {"e": "trade", "E": 1672515782136, "s": "BNBBTC", "t": 12345,
     "p": "0.001", "q": "100", "T": 1672515782136, "m": true}

Binance Kline Format:
    {"e": "kline", "E": 1672515782136, "s": "BNBBTC",
     "k": {"t": 1672515780000, "i": "1m", "c": "0.0020", "v": "1000", ...}}

Combined streams wrap events as {"stream": "<name>", "data": {...}};
the envelope is removed before field extraction.
"""

from typing import Any, Dict, Optional

import structlog

from market_feed.adapters.fields import FieldAliases
from market_feed.models.sample import Sample

logger = structlog.get_logger(__name__)


class BinanceNormalizer:
    """
    Normalizes Binance-family events to Sample.

    Every logical field is resolved through an ordered alias table. Fields
    the event does not carry default to zero, and the event time falls back
    to the current time, so no event is rejected for a missing field.

    Example:
        >>> sample = BinanceNormalizer.normalize_event(
        ...     {"E": 1700000000000, "c": "42000.5", "v": "12.3"}
        ... )
        >>> sample.price
        Decimal('42000.5')
    """

    EVENT_TIME = FieldAliases("event_time", ("E", "eventTime", "k.t"))
    UPDATE_ID = FieldAliases("update_id", ("u", "U", "updateId"))
    PRICE = FieldAliases("price", ("c", "p", "P", "price", "k.c"))
    BEST_BID = FieldAliases("best_bid", ("b", "bestBidPrice"))
    BEST_ASK = FieldAliases("best_ask", ("a", "bestAskPrice"))
    VOLUME = FieldAliases("volume", ("v", "volume", "k.v"))

    # channel -> stream name suffix; unknown channels fall back to bookTicker
    CHANNEL_SUFFIXES = {
        "ticker": "ticker",
        "trade": "trade",
        "miniTicker": "miniTicker",
        "bookTicker": "bookTicker",
    }
    DEFAULT_CHANNEL = "bookTicker"

    @staticmethod
    def stream_name(symbol: str, channel: str | None, interval: str = "1m") -> str:
        """
        Build the Binance stream name for a symbol and channel.

        Args:
            symbol: Symbol in any case (e.g., "BTCUSDT").
            channel: One of ticker, trade, kline, miniTicker, bookTicker.
                None or unknown values select bookTicker.
            interval: Kline interval, used only for the kline channel.

        Returns:
            str: Stream name (e.g., "btcusdt@bookTicker", "ethusdt@kline_5m").
        """
        lower_symbol = symbol.lower()
        if channel == "kline":
            return f"{lower_symbol}@kline_{interval or '1m'}"
        suffix = BinanceNormalizer.CHANNEL_SUFFIXES.get(
            channel or "", BinanceNormalizer.DEFAULT_CHANNEL
        )
        return f"{lower_symbol}@{suffix}"

    @staticmethod
    def unwrap(message: Any) -> Any:
        """Remove the combined-stream envelope, if present."""
        if isinstance(message, dict) and "stream" in message and "data" in message:
            return message["data"]
        return message

    @staticmethod
    def normalize_event(message: Dict[str, Any], raw: Optional[Dict[str, Any]] = None) -> Sample:
        """
        Normalize one Binance-family event.

        Args:
            message: Decoded event (envelope already removed).
            raw: Frame as received, when it differs from message (e.g. a
                combined-stream envelope). Defaults to message.

        Returns:
            Sample: Normalized sample; raw holds the received frame unchanged.

        Raises:
            TypeError: If the message is not a JSON object.
        """
        if not isinstance(message, dict):
            raise TypeError(
                f"Expected JSON object from Binance stream, got {type(message).__name__}"
            )

        return Sample(
            timestamp=BinanceNormalizer.EVENT_TIME.resolve_timestamp(message),
            update_id=BinanceNormalizer.UPDATE_ID.resolve_int(message),
            price=BinanceNormalizer.PRICE.resolve(message),
            best_bid=BinanceNormalizer.BEST_BID.resolve(message),
            best_ask=BinanceNormalizer.BEST_ASK.resolve(message),
            volume=BinanceNormalizer.VOLUME.resolve(message),
            raw=message if raw is None else raw,
        )
