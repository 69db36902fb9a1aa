"""
Unit Tests for the Binance-Family Adapter

These tests verify that the Binance-family adapter:
- Builds stream names and connection targets per market
- Normalizes every channel's event shape through the alias tables
- Returns a FeedResult with one sample per event
- Rejects invalid parameters before connecting

Run with:
    pytest tests/test_binance_adapter.py -v
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from market_feed.adapters.binance import (
    BinanceFamilyAdapter,
    BinanceNormalizer,
    stream_binance_family,
)
from market_feed.config.models import EndpointsConfig
from market_feed.exceptions import FeedConfigurationError, FeedError
from market_feed.models.stream import StopReason, StreamQuery
from tests.fakes import FakeConnection, frames

BOOK_TICKER = {
    "e": "bookTicker",
    "u": 400900217,
    "E": 1700000000000,
    "s": "BTCUSDT",
    "b": "42000.10",
    "B": "3.2",
    "a": "42000.20",
    "A": "1.1",
}

TICKER_24H = {
    "e": "24hrTicker",
    "E": 1700000001000,
    "s": "BTCUSDT",
    "P": "1.25",
    "c": "42010.00",
    "b": "42009.90",
    "a": "42010.10",
    "v": "15234.5",
}

TRADE = {"e": "trade", "E": 1700000002000, "s": "BTCUSDT", "p": "42005.5", "q": "0.01"}

KLINE = {
    "e": "kline",
    "E": 1700000003000,
    "s": "ETHUSDT",
    "k": {"t": 1700000000000, "i": "5m", "c": "2250.75", "v": "812.4"},
}


# ============================================
# Tests for Stream Names
# ============================================


class TestStreamName:
    """Tests for stream identifier construction"""

    def test_book_ticker(self):
        assert BinanceNormalizer.stream_name("BTCUSDT", "bookTicker") == "btcusdt@bookTicker"

    def test_kline_with_interval(self):
        assert BinanceNormalizer.stream_name("ETHUSDT", "kline", "5m") == "ethusdt@kline_5m"

    def test_kline_default_interval(self):
        assert BinanceNormalizer.stream_name("ETHUSDT", "kline") == "ethusdt@kline_1m"

    @pytest.mark.parametrize("channel", ["ticker", "trade", "miniTicker"])
    def test_plain_channels(self, channel):
        assert BinanceNormalizer.stream_name("SOLUSDT", channel) == f"solusdt@{channel}"

    @pytest.mark.parametrize("channel", [None, "", "depth", "unknown"])
    def test_unknown_channel_defaults_to_book_ticker(self, channel):
        assert BinanceNormalizer.stream_name("BTCUSDT", channel) == "btcusdt@bookTicker"


# ============================================
# Tests for Target Resolution
# ============================================


class TestTargetResolution:
    """Tests for market -> endpoint mapping"""

    def resolve(self, adapter, **query):
        prepared = adapter.prepare(StreamQuery(symbol="BTCUSDT", **query))
        return adapter.resolve_target(prepared), adapter.provider_for(prepared)

    def test_futures_is_default(self):
        target, provider = self.resolve(BinanceFamilyAdapter())
        assert target == "wss://fstream.binance.com/ws/btcusdt@bookTicker"
        assert provider == "binance"

    def test_spot(self):
        target, provider = self.resolve(BinanceFamilyAdapter(), market="spot", channel="trade")
        assert target == "wss://stream.binance.com:9443/ws/btcusdt@trade"
        assert provider == "binance"

    def test_aster_venue(self):
        target, provider = self.resolve(BinanceFamilyAdapter(), market="aster")
        assert target == "wss://fapi.asterdex.com/ws/btcusdt@bookTicker"
        assert provider == "aster"

    def test_market_is_case_insensitive(self):
        target, _ = self.resolve(BinanceFamilyAdapter(), market="SPOT")
        assert target.startswith("wss://stream.binance.com:9443/ws/")

    def test_endpoint_override(self):
        adapter = BinanceFamilyAdapter(endpoint_override="ws://localhost:9000/ws/")
        target, _ = self.resolve(adapter)
        assert target == "ws://localhost:9000/ws/btcusdt@bookTicker"

    def test_configured_endpoints(self):
        endpoints = EndpointsConfig().with_override("binance", "futures", "ws://mirror/ws")
        target, _ = self.resolve(BinanceFamilyAdapter(endpoints=endpoints))
        assert target == "ws://mirror/ws/btcusdt@bookTicker"

    def test_unknown_market_rejected(self):
        with pytest.raises(FeedConfigurationError, match="Unknown Binance-family market"):
            BinanceFamilyAdapter().prepare(StreamQuery(symbol="BTCUSDT", market="options"))

    def test_missing_endpoint_rejected(self):
        adapter = BinanceFamilyAdapter(endpoints=EndpointsConfig(providers={}))
        with pytest.raises(FeedConfigurationError, match="No endpoint"):
            self.resolve(adapter)


# ============================================
# Tests for Event Normalization
# ============================================


class TestNormalization:
    """Tests for alias-table field extraction"""

    def test_book_ticker(self):
        sample = BinanceNormalizer.normalize_event(BOOK_TICKER)
        assert sample.best_bid == Decimal("42000.10")
        assert sample.best_ask == Decimal("42000.20")
        assert sample.price == Decimal("0")
        assert sample.volume == Decimal("0")
        assert sample.update_id == 400900217
        assert sample.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert sample.raw == BOOK_TICKER

    def test_ticker_prefers_last_price_over_change_percent(self):
        sample = BinanceNormalizer.normalize_event(TICKER_24H)
        assert sample.price == Decimal("42010.00")
        assert sample.volume == Decimal("15234.5")
        assert sample.update_id is None

    def test_trade_price(self):
        sample = BinanceNormalizer.normalize_event(TRADE)
        assert sample.price == Decimal("42005.5")

    def test_kline_nested_fields(self):
        sample = BinanceNormalizer.normalize_event(KLINE)
        assert sample.price == Decimal("2250.75")
        assert sample.volume == Decimal("812.4")

    def test_missing_fields_default_to_zero(self):
        sample = BinanceNormalizer.normalize_event({"s": "BTCUSDT"})
        assert sample.price == sample.best_bid == sample.best_ask == Decimal("0")
        assert sample.timestamp.tzinfo is not None

    def test_non_object_rejected(self):
        with pytest.raises(TypeError):
            BinanceNormalizer.normalize_event(["not", "an", "object"])

    def test_combined_stream_envelope_unwrapped(self):
        envelope = {"stream": "btcusdt@bookTicker", "data": BOOK_TICKER}
        sample = BinanceFamilyAdapter().transform(envelope)
        assert sample.best_bid == Decimal("42000.10")
        assert sample.update_id == 400900217

    def test_combined_stream_raw_keeps_envelope(self):
        envelope = {"stream": "btcusdt@bookTicker", "data": BOOK_TICKER}
        sample = BinanceFamilyAdapter().transform(envelope)
        assert sample.raw == envelope
        assert sample.raw["stream"] == "btcusdt@bookTicker"

    def test_plain_event_raw_unchanged(self):
        assert BinanceFamilyAdapter().transform(TRADE).raw == TRADE


# ============================================
# Tests for stream_binance_family
# ============================================


class TestStreamBinanceFamily:
    """End-to-end tests through a fake connection"""

    @pytest.mark.asyncio
    async def test_collects_samples_until_limit(self, make_collector):
        """Verify one sample per event and result shape"""
        conn = FakeConnection(frames(BOOK_TICKER, BOOK_TICKER, BOOK_TICKER))
        collector, connector = make_collector(conn)

        result = await stream_binance_family(
            symbol="BTCUSDT", channel="bookTicker", limit=2, duration_ms=5000, collector=collector
        )

        assert connector.calls[0][0] == "wss://fstream.binance.com/ws/btcusdt@bookTicker"
        assert conn.sent == []  # no subscription handshake
        assert result.provider == "binance"
        assert result.channel == "bookTicker"
        assert result.symbol == "BTCUSDT"
        assert len(result.samples) == 2
        assert result.stats.count == 2
        assert result.stats.duration_ms == 5000
        assert result.stats.stop_reason == StopReason.LIMIT_REACHED
        assert conn.close_calls == 1

    @pytest.mark.asyncio
    async def test_aster_kline(self, make_collector):
        """Verify the alternate venue reports its own provider name"""
        conn = FakeConnection(frames(KLINE), end="close")
        collector, connector = make_collector(conn)

        result = await stream_binance_family(
            symbol="ETHUSDT", channel="kline", interval="5m", market="aster", collector=collector
        )

        assert connector.calls[0][0] == "wss://fapi.asterdex.com/ws/ethusdt@kline_5m"
        assert result.provider == "aster"
        assert result.samples[0].price == Decimal("2250.75")
        assert result.stats.stop_reason == StopReason.CLOSED

    @pytest.mark.asyncio
    async def test_timeout_returns_partial_samples(self, make_collector):
        """Verify a quiet stream returns fewer samples than the limit"""
        conn = FakeConnection(frames(TRADE), end="hang")
        collector, _ = make_collector(conn)

        result = await stream_binance_family(
            symbol="BTCUSDT", channel="trade", limit=10, duration_ms=80, collector=collector
        )

        assert result.stats.count == 1
        assert result.stats.stop_reason == StopReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_malformed_frame_skipped(self, make_collector):
        """Verify a bad frame does not abort the run"""
        conn = FakeConnection(["garbage", *frames(TRADE)], end="close")
        collector, _ = make_collector(conn)

        result = await stream_binance_family(symbol="BTCUSDT", channel="trade", collector=collector)

        assert result.stats.count == 1
        assert result.stats.skipped_frames == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"limit": 0},
            {"duration_ms": 0},
            {"symbol": ""},
            {"market": "margin"},
            {"symbol": None},
            {"symbol": 42},
            {"limit": "many"},
        ],
    )
    async def test_invalid_parameters_rejected_before_connecting(self, make_collector, kwargs):
        """Verify configuration errors never open a connection"""
        collector, connector = make_collector()
        params = {"symbol": "BTCUSDT", "collector": collector}
        params.update(kwargs)

        with pytest.raises(FeedConfigurationError):
            await stream_binance_family(**params)

        assert connector.calls == []

    @pytest.mark.asyncio
    async def test_wrong_type_surfaces_as_feed_error(self, make_collector):
        """Verify argument type errors use the library's error type"""
        collector, connector = make_collector()

        with pytest.raises(FeedError, match="Invalid stream parameters"):
            await stream_binance_family(symbol=None, collector=collector)

        assert connector.calls == []

    @pytest.mark.asyncio
    async def test_missing_kline_interval_uses_default(self, make_collector):
        """Verify interval=None falls back to 1m"""
        conn = FakeConnection(frames(KLINE), end="close")
        collector, connector = make_collector(conn)

        result = await stream_binance_family(
            symbol="ETHUSDT", channel="kline", interval=None, collector=collector
        )

        assert connector.calls[0][0] == "wss://fstream.binance.com/ws/ethusdt@kline_1m"
        assert result.stats.count == 1
