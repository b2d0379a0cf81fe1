"""Tests for Candle and CandleSeries."""

import pytest
from pydantic import ValidationError

from core.models import Candle, CandleSeries

DAY = 86400


def make_candle(index: int, close: float, high: float | None = None, low: float | None = None) -> Candle:
    return Candle(
        time=index * DAY,
        open=close,
        high=high if high is not None else close,
        low=low if low is not None else close,
        close=close,
    )


def make_series(closes: list[float], max_size: int | None = None) -> CandleSeries:
    candles = [make_candle(i, c) for i, c in enumerate(closes)]
    return CandleSeries.from_candles("BTC", "1d", candles, max_size=max_size)


class TestCandle:
    def test_direction(self):
        up = Candle(time=0, open=100, high=110, low=95, close=105)
        down = Candle(time=0, open=100, high=101, low=90, close=92)

        assert up.is_bullish and not up.is_bearish
        assert down.is_bearish and not down.is_bullish

    def test_frozen(self):
        candle = make_candle(0, 100.0)
        with pytest.raises(ValidationError):
            candle.close = 101.0

    def test_merge_keeps_time(self):
        """A merged tick replaces OHLC but never the candle's own time."""
        candle = make_candle(3, 100.0)
        tick = Candle(time=999, open=101, high=120, low=99, close=118)

        merged = candle.merge(tick)

        assert merged.time == candle.time
        assert (merged.open, merged.high, merged.low, merged.close) == (101, 120, 99, 118)


class TestFromCandles:
    def test_sorts_by_time(self):
        candles = [make_candle(2, 3.0), make_candle(0, 1.0), make_candle(1, 2.0)]
        series = CandleSeries.from_candles("SOL", "1d", candles)

        assert [c.time for c in series.candles] == [0, DAY, 2 * DAY]
        assert series.closes() == [1.0, 2.0, 3.0]

    def test_duplicate_time_keeps_later_record(self):
        candles = [make_candle(0, 1.0), make_candle(1, 2.0), make_candle(1, 2.5)]
        series = CandleSeries.from_candles("SOL", "1d", candles)

        assert len(series) == 2
        assert series.closes() == [1.0, 2.5]

    def test_max_size_keeps_newest(self):
        series = make_series([1.0, 2.0, 3.0, 4.0], max_size=2)
        assert series.closes() == [3.0, 4.0]

    def test_price_accessors(self):
        candles = [make_candle(0, 10.0, high=12.0, low=9.0)]
        series = CandleSeries.from_candles("SOL", "1d", candles)

        assert series.highs() == [12.0]
        assert series.lows() == [9.0]
        assert series.last == candles[0]

    def test_empty(self):
        series = CandleSeries.from_candles("SOL", "1d", [])
        assert len(series) == 0
        assert series.last is None


class TestApplyTick:
    def test_same_time_overwrites_last(self):
        series = make_series([100.0, 101.0, 102.0])
        tick = Candle(time=2 * DAY, open=102, high=106, low=101, close=105)

        assert series.apply_tick(tick) is True
        assert len(series) == 3
        assert series.last.close == 105
        assert series.last.high == 106
        assert series.last.time == 2 * DAY

    def test_later_time_appends(self):
        series = make_series([100.0, 101.0])
        tick = make_candle(2, 99.0)

        assert series.apply_tick(tick) is True
        assert len(series) == 3
        assert series.closes() == [100.0, 101.0, 99.0]

    def test_older_time_dropped(self):
        series = make_series([100.0, 101.0, 102.0])
        tick = make_candle(1, 50.0)

        assert series.apply_tick(tick) is False
        assert series.closes() == [100.0, 101.0, 102.0]

    def test_empty_series_drops_tick(self):
        """Ticks before history has loaded are discarded."""
        series = CandleSeries(symbol="BTC", interval="1d")

        assert series.apply_tick(make_candle(0, 100.0)) is False
        assert len(series) == 0

    def test_append_respects_max_size(self):
        series = make_series([1.0, 2.0, 3.0], max_size=3)

        series.apply_tick(make_candle(3, 4.0))

        assert series.closes() == [2.0, 3.0, 4.0]

    def test_order_and_uniqueness_preserved(self):
        series = make_series([1.0, 2.0])
        for tick in [make_candle(1, 2.2), make_candle(2, 3.0), make_candle(0, 9.0), make_candle(2, 3.1)]:
            series.apply_tick(tick)

        times = [c.time for c in series.candles]
        assert times == sorted(set(times))
        assert series.closes() == [1.0, 2.2, 3.1]
