"""
OKX data normalizer.

Converts OKX public channel envelopes into Sample models and maps bare
symbols to OKX instrument ids.

OKX Ticker Envelope:
    {
        "arg": {"channel": "tickers", "instId": "BTC-USDT-SWAP"},
        "data": [
            {
                "instId": "BTC-USDT-SWAP",
                "last": "50000.0",
                "askPx": "50001.0",
                "bidPx": "50000.0",
                "vol24h": "1000.5",
                "ts": "1234567890123"
            }
        ]
    }

Subscription acknowledgements ({"event": "subscribe", "arg": {...}}) and
error events carry no data array and are not samples.

Instrument ID Mapping:
    BTCUSDT + spot -> BTC-USDT
    BTCUSDT + swap -> BTC-USDT-SWAP
"""

from typing import Any, Dict, List, Tuple

import structlog

from market_feed.adapters.fields import FieldAliases
from market_feed.models.sample import Sample

logger = structlog.get_logger(__name__)


class OKXNormalizer:
    """
    Normalizes OKX envelopes to Sample and builds instrument ids.

    Example:
        >>> OKXNormalizer.instrument_id("ETHUSDT", "swap")
        'ETH-USDT-SWAP'
        >>> OKXNormalizer.instrument_id("ETHUSDT", "spot")
        'ETH-USDT'
    """

    # Checked in order; first matching suffix wins
    QUOTE_CURRENCIES: Tuple[str, ...] = ("USDT", "USDC", "BTC", "ETH")
    FALLBACK_QUOTE = "USDT"
    DERIVATIVE_SUFFIX = "SWAP"

    TIMESTAMP = FieldAliases("ts", ("ts",))
    PRICE = FieldAliases("price", ("last", "lastPx"))
    BEST_BID = FieldAliases("best_bid", ("bidPx",))
    BEST_ASK = FieldAliases("best_ask", ("askPx",))
    VOLUME_24H = FieldAliases("volume_24h", ("vol24h",))

    @staticmethod
    def split_symbol(symbol: str) -> Tuple[str, str]:
        """
        Split a bare symbol into (base, quote).

        When no known quote currency matches, the quote falls back to USDT
        and the whole symbol becomes the base. A warning is logged because
        an unusual pair can be silently misclassified this way.

        Args:
            symbol: Bare symbol (e.g., "ETHUSDT").

        Returns:
            Tuple[str, str]: (base, quote), e.g. ("ETH", "USDT").
        """
        upper = symbol.upper()
        for quote in OKXNormalizer.QUOTE_CURRENCIES:
            if upper.endswith(quote):
                base = upper[: len(upper) - len(quote)] or upper
                return base, quote

        logger.warning(
            "okx_quote_fallback",
            symbol=symbol,
            quote=OKXNormalizer.FALLBACK_QUOTE,
        )
        return upper, OKXNormalizer.FALLBACK_QUOTE

    @staticmethod
    def derive_pair(symbol: str) -> str:
        """
        Derive the OKX pair (e.g., "ETH-USDT") from a bare symbol.

        Example:
            >>> OKXNormalizer.derive_pair("ETHUSDT")
            'ETH-USDT'
        """
        base, quote = OKXNormalizer.split_symbol(symbol)
        return f"{base}-{quote}"

    @staticmethod
    def instrument_id(symbol: str, market: str = "swap") -> str:
        """
        Build the OKX instrument id.

        Args:
            symbol: Bare symbol.
            market: "spot" for the pair itself; anything else appends -SWAP.
        """
        pair = OKXNormalizer.derive_pair(symbol)
        if market.lower() == "spot":
            return pair
        return f"{pair}-{OKXNormalizer.DERIVATIVE_SUFFIX}"

    @staticmethod
    def subscription(channel: str, inst_id: str) -> Dict[str, Any]:
        """Build the subscribe message for one channel/instrument."""
        return {"op": "subscribe", "args": [{"channel": channel, "instId": inst_id}]}

    @staticmethod
    def has_data(message: Any) -> bool:
        """True for envelopes carrying a non-empty data array."""
        return (
            isinstance(message, dict)
            and isinstance(message.get("data"), list)
            and len(message["data"]) > 0
        )

    @staticmethod
    def normalize_entry(entry: Dict[str, Any]) -> Sample:
        """
        Normalize one entry of an envelope's data array.

        Missing numeric fields default to zero; a missing ts defaults to now.
        """
        if not isinstance(entry, dict):
            return Sample(
                timestamp=OKXNormalizer.TIMESTAMP.resolve_timestamp({}),
                raw={"value": entry},
            )

        return Sample(
            timestamp=OKXNormalizer.TIMESTAMP.resolve_timestamp(entry),
            price=OKXNormalizer.PRICE.resolve(entry),
            best_bid=OKXNormalizer.BEST_BID.resolve(entry),
            best_ask=OKXNormalizer.BEST_ASK.resolve(entry),
            volume=OKXNormalizer.VOLUME_24H.resolve(entry),
            raw=entry,
        )

    @staticmethod
    def flatten(envelopes: List[Dict[str, Any]]) -> List[Sample]:
        """
        Expand envelopes into samples.

        Envelopes are taken in arrival order and each data array in its own
        order, so two envelopes with 1 and 2 entries yield 3 samples.
        """
        samples: List[Sample] = []
        for envelope in envelopes:
            for entry in envelope.get("data") or []:
                samples.append(OKXNormalizer.normalize_entry(entry))

        logger.debug(
            "okx_envelopes_flattened",
            envelopes=len(envelopes),
            samples=len(samples),
        )
        return samples
