"""Technical indicators (pure math, no I/O)."""

from core.indicators.indicators import (
    NAN,
    is_nan,
    last_value,
    sma,
    ema,
    ema_step,
    donchian_high,
    donchian_low,
    find_last_swing_high,
    find_last_swing_low,
    rsi,
    true_range,
    atr,
)
from core.indicators.convergence import MaConvergence, check_ma_convergence

__all__ = [
    "NAN",
    "is_nan",
    "last_value",
    "sma",
    "ema",
    "ema_step",
    "donchian_high",
    "donchian_low",
    "find_last_swing_high",
    "find_last_swing_low",
    "rsi",
    "true_range",
    "atr",
    "MaConvergence",
    "check_ma_convergence",
]
