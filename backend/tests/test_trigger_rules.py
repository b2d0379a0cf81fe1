"""Tests for strategy-family rules, the registry and evaluate_triggers."""

from unittest.mock import patch

import pytest

from core.models import AssetTriggerConfig, Candle, CandleSeries, StrategyFamily
from core.strategy import (
    MIN_CANDLES,
    RuleResult,
    evaluate_triggers,
    get_rule,
    list_families,
    register_rule,
)
from core.strategy import registry

DAY = 86400


def make_series(
    closes: list[float],
    highs: list[float] | None = None,
    lows: list[float] | None = None,
) -> CandleSeries:
    highs = highs or closes
    lows = lows or closes
    candles = [
        Candle(time=i * DAY, open=c, high=h, low=lo, close=c)
        for i, (c, h, lo) in enumerate(zip(closes, highs, lows))
    ]
    return CandleSeries.from_candles("TEST", "1d", candles)


def make_config(family: StrategyFamily) -> AssetTriggerConfig:
    return AssetTriggerConfig(symbol="TEST", exchange_id="TST", family=family)


def evaluate(family: StrategyFamily, series: CandleSeries | None, loading: bool = False):
    return evaluate_triggers(make_config(family), series, loading=loading)


# ── Registry ──────────────────────────────────────────────────────────────


class TestRegistry:
    def test_every_family_has_a_rule(self):
        assert set(list_families()) == set(StrategyFamily)
        for family in StrategyFamily:
            assert callable(get_rule(family))

    def test_families_sorted_by_name(self):
        values = [f.value for f in list_families()]
        assert values == sorted(values)

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError, match="already registered"):
            @register_rule(StrategyFamily.MACRO_TREND)
            def another(closes, highs, lows):
                return RuleResult()

    def test_unknown_family_raises_key_error(self):
        with patch.dict(registry._REGISTRY, clear=True):
            with pytest.raises(KeyError, match="No rule for family"):
                get_rule(StrategyFamily.MACRO_TREND)


# ── Evaluator state machine ───────────────────────────────────────────────


class TestEvaluatorStates:
    def test_loading(self):
        state = evaluate(StrategyFamily.MACRO_TREND, make_series([100.0] * 50), loading=True)

        assert state.loading is True
        assert state.error is False
        assert state.entry is False and state.exit is False

    def test_no_series_is_error(self):
        state = evaluate(StrategyFamily.MOMENTUM_BREAKOUT, None)

        assert state.error is True
        assert state.loading is False
        assert state.price is None

    def test_too_few_candles_is_error(self):
        closes = [float(100 + i) for i in range(MIN_CANDLES - 1)]
        state = evaluate(StrategyFamily.MOMENTUM_BREAKOUT, make_series(closes))

        assert state.error is True
        assert state.entry is False and state.exit is False
        assert state.price == closes[-1]

    def test_minimum_candles_evaluates(self):
        state = evaluate(StrategyFamily.MOMENTUM_BREAKOUT, make_series([100.0] * MIN_CANDLES))

        assert state.error is False
        assert state.loading is False
        assert state.price == 100.0


# ── macro_trend ───────────────────────────────────────────────────────────


class TestMacroTrend:
    def test_close_above_ema(self):
        closes = [float(100 + i) for i in range(30)]
        state = evaluate(StrategyFamily.MACRO_TREND, make_series(closes))

        assert state.entry is True
        assert state.exit is False
        assert state.take_profit is False

    def test_close_below_ema(self):
        closes = [float(200 - i) for i in range(30)]
        state = evaluate(StrategyFamily.MACRO_TREND, make_series(closes))

        assert state.entry is False
        assert state.exit is True
        assert state.take_profit is True

    def test_short_history_gives_no_signals(self):
        """20 candles pass the floor but EMA-21 is still undefined."""
        closes = [float(100 + i) for i in range(20)]
        state = evaluate(StrategyFamily.MACRO_TREND, make_series(closes))

        assert state.error is False
        assert state.entry is False
        assert state.exit is False

    def test_never_both(self):
        for closes in ([100.0] * 40, [float(100 + i % 5) for i in range(40)]):
            state = evaluate(StrategyFamily.MACRO_TREND, make_series(closes))
            assert not (state.entry and state.exit)


# ── structure_break ───────────────────────────────────────────────────────


def _structure_break_series(last_close: float) -> CandleSeries:
    """59 flat bars with a swing high of 105 at index 50, then the current bar."""
    closes = [100.0] * 59 + [last_close]
    highs = [101.0] * 59 + [last_close + 1]
    highs[50] = 105.0
    lows = [99.0] * 59 + [last_close - 1]
    return make_series(closes, highs, lows)


class TestStructureBreak:
    def test_break_above_sma_and_swing_high(self):
        state = evaluate(StrategyFamily.STRUCTURE_BREAK, _structure_break_series(106.0))

        assert state.entry is True
        assert state.exit is False
        assert state.take_profit is False

    def test_above_sma_but_below_swing_high(self):
        state = evaluate(StrategyFamily.STRUCTURE_BREAK, _structure_break_series(103.0))

        assert state.entry is False
        assert state.exit is False

    def test_close_below_sma50(self):
        state = evaluate(StrategyFamily.STRUCTURE_BREAK, _structure_break_series(95.0))

        assert state.entry is False
        assert state.exit is True
        assert state.take_profit is True

    def test_sma50_undefined_suppresses_signals(self):
        closes = [100.0] * 29 + [80.0]
        state = evaluate(StrategyFamily.STRUCTURE_BREAK, make_series(closes))

        assert state.error is False
        assert state.entry is False
        assert state.exit is False


# ── momentum_breakout ─────────────────────────────────────────────────────


class TestMomentumBreakout:
    def test_new_high_breakout(self):
        """Closes 100..124 with highs equal to closes."""
        closes = [float(100 + i) for i in range(25)]
        state = evaluate(StrategyFamily.MOMENTUM_BREAKOUT, make_series(closes))

        assert state.entry is True
        assert state.exit is False
        assert state.take_profit is False

    def test_current_bar_excluded_from_prior_high(self):
        """A bar whose own high is the window max still counts as a break."""
        closes = [100.0] * 24 + [110.0]
        highs = [101.0] * 24 + [112.0]
        state = evaluate(StrategyFamily.MOMENTUM_BREAKOUT, make_series(closes, highs))

        assert state.entry is True

    def test_close_below_sma10(self):
        closes = [float(100 + i) for i in range(24)] + [110.0]
        state = evaluate(StrategyFamily.MOMENTUM_BREAKOUT, make_series(closes))

        assert state.entry is False
        assert state.exit is True
        assert state.take_profit is True


# ── structure_break_alt ───────────────────────────────────────────────────


def _alt_series(count: int, dip_index: int, last_close: float) -> CandleSeries:
    closes = [100.0] * (count - 1) + [last_close]
    highs = [101.0] * (count - 1) + [last_close + 1]
    lows = [99.0] * (count - 1) + [last_close - 1]
    lows[dip_index] = 90.0
    return make_series(closes, highs, lows)


class TestStructureBreakAlt:
    def test_close_above_sma100(self):
        state = evaluate(StrategyFamily.STRUCTURE_BREAK_ALT, _alt_series(110, 100, 120.0))

        assert state.entry is True
        assert state.exit is False
        assert state.take_profit is False

    def test_break_below_swing_low(self):
        state = evaluate(StrategyFamily.STRUCTURE_BREAK_ALT, _alt_series(110, 100, 89.0))

        assert state.entry is False
        assert state.exit is True
        assert state.take_profit is True

    def test_exit_without_sma100(self):
        """The swing-low exit works before SMA-100 is defined."""
        state = evaluate(StrategyFamily.STRUCTURE_BREAK_ALT, _alt_series(60, 50, 85.0))

        assert state.error is False
        assert state.entry is False
        assert state.exit is True
