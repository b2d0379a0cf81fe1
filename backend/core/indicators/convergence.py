"""Moving-average convergence ("entanglement") detection.

Six averages (SMA and EMA of each period) compressed into a narrow band
often precede a strong directional move. A snapshot passes when all three
rules hold:

1. Spread rule: max - min of the six averages <= ``max_spread_pct`` % of price
2. ATR rule: the same spread <= ``atr_mult`` * ATR
3. Disorder rule: the averages are neither stacked bullish nor bearish
"""

from dataclasses import dataclass
from typing import Sequence

from core.indicators.indicators import atr, ema, is_nan, last_value, sma


@dataclass(frozen=True)
class MaConvergence:
    """Snapshot of the moving averages at the latest bar."""

    price: float
    averages: dict[str, float]
    spread: float
    spread_pct: float
    atr: float
    passed_spread: bool
    passed_atr: bool
    passed_disorder: bool

    @property
    def triggered(self) -> bool:
        return self.passed_spread and self.passed_atr and self.passed_disorder


def _is_stacked(groups: list[tuple[float, float]], bullish: bool) -> bool:
    for (fast_a, fast_b), (slow_a, slow_b) in zip(groups, groups[1:]):
        if bullish and not min(fast_a, fast_b) > max(slow_a, slow_b):
            return False
        if not bullish and not max(fast_a, fast_b) < min(slow_a, slow_b):
            return False
    return True


def check_ma_convergence(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    periods: Sequence[int] = (20, 60, 120),
    max_spread_pct: float = 1.5,
    atr_mult: float = 1.5,
    atr_period: int = 14,
) -> MaConvergence | None:
    """
    Evaluate the convergence rules at the latest bar.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices
        periods: Average periods, fastest first
        max_spread_pct: Spread limit as a percentage of price
        atr_mult: Spread limit as a multiple of ATR
        atr_period: ATR period

    Returns:
        MaConvergence snapshot, or None if the longest period lacks history
    """
    if len(closes) < max(periods):
        return None

    price = closes[-1]
    averages: dict[str, float] = {}
    groups: list[tuple[float, float]] = []

    for period in periods:
        sma_value = last_value(sma(closes, period))
        ema_value = last_value(ema(closes, period))
        if is_nan(sma_value) or is_nan(ema_value):
            return None
        averages[f"sma{period}"] = sma_value
        averages[f"ema{period}"] = ema_value
        groups.append((sma_value, ema_value))

    atr_value = last_value(atr(highs, lows, closes, atr_period, skip_first=True))
    if is_nan(atr_value):
        return None

    spread = max(averages.values()) - min(averages.values())
    spread_pct = spread / price * 100 if price else float("inf")

    return MaConvergence(
        price=price,
        averages=averages,
        spread=spread,
        spread_pct=spread_pct,
        atr=atr_value,
        passed_spread=spread_pct <= max_spread_pct,
        passed_atr=spread <= atr_mult * atr_value,
        passed_disorder=not _is_stacked(groups, True) and not _is_stacked(groups, False),
    )
