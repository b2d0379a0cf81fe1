"""Entry/exit rules for each strategy family.

Every rule compares the current close (last element) against indicator
levels computed from the full history. A level that is not yet defined
suppresses the comparisons that depend on it.

This module is pure business logic with no I/O dependencies.
"""

import math
from typing import Sequence

from core.indicators import (
    ema,
    find_last_swing_high,
    find_last_swing_low,
    is_nan,
    last_value,
    sma,
)
from core.models.config import StrategyFamily
from core.strategy.protocol import RuleResult
from core.strategy.registry import register_rule

SWING_LEFT = 10
SWING_RIGHT = 2
BREAKOUT_LOOKBACK = 20


def _below(price: float, level: float | None) -> bool:
    return not is_nan(level) and price < level


@register_rule(StrategyFamily.MACRO_TREND)
def macro_trend(
    closes: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
) -> RuleResult:
    """Close above/below EMA-21."""
    price = closes[-1]
    ema21 = last_value(ema(closes, 21))
    if is_nan(ema21):
        return RuleResult()

    below = price < ema21
    return RuleResult(entry=price > ema21, exit=below, take_profit=below)


@register_rule(StrategyFamily.STRUCTURE_BREAK)
def structure_break(
    closes: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
) -> RuleResult:
    """Close above SMA-50 and the last confirmed swing high; exit below SMA-50."""
    price = closes[-1]
    sma50 = last_value(sma(closes, 50))
    take_profit = _below(price, last_value(sma(closes, 20)))
    if is_nan(sma50):
        return RuleResult(take_profit=take_profit)

    swing_high = find_last_swing_high(highs, SWING_LEFT, SWING_RIGHT)
    breaks_swing = swing_high is not None and price > swing_high

    return RuleResult(
        entry=price > sma50 and breaks_swing,
        exit=price < sma50,
        take_profit=take_profit,
    )


@register_rule(StrategyFamily.MOMENTUM_BREAKOUT)
def momentum_breakout(
    closes: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
) -> RuleResult:
    """Close above the prior 20-bar high; exit below SMA-10."""
    price = closes[-1]

    # Prior bars only, the current candle is excluded
    prior = highs[-(BREAKOUT_LOOKBACK + 1):-1]
    prev_high = max(prior) if len(prior) > 0 else math.inf

    below = _below(price, last_value(sma(closes, 10)))
    return RuleResult(entry=price > prev_high, exit=below, take_profit=below)


@register_rule(StrategyFamily.STRUCTURE_BREAK_ALT)
def structure_break_alt(
    closes: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
) -> RuleResult:
    """Close above SMA-100; exit on a break of the last confirmed swing low."""
    price = closes[-1]
    sma100 = last_value(sma(closes, 100))
    swing_low = find_last_swing_low(lows, SWING_LEFT, SWING_RIGHT)

    return RuleResult(
        entry=not is_nan(sma100) and price > sma100,
        exit=swing_low is not None and price < swing_low,
        take_profit=_below(price, last_value(sma(closes, 50))),
    )
