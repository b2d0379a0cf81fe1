"""Technical indicators for trigger evaluation.

All functions are pure: they never mutate their input and never raise for
short history. Insufficient data is reported through NaN padding (SMA,
Donchian, RSI, ATR), an empty list (EMA) or ``None`` (swing points).

Note the EMA/SMA asymmetry: ``ema()`` returns ``[]`` when the input is
shorter than the period while ``sma()`` returns a NaN-padded list of the
same length. Trigger rules rely on both conventions.
"""

import math
from typing import Sequence

import numpy as np

NAN = float("nan")


def is_nan(value) -> bool:
    """Check if a value is missing (None or NaN)."""
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def last_value(values: Sequence[float]) -> float | None:
    """Return the final element of a derived series, or None if it is empty."""
    if len(values) == 0:
        return None
    return values[-1]


def sma(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of price values
        period: SMA period

    Returns:
        List of SMA values (same length as input, NaN for the first period-1)
    """
    if len(values) < period:
        return [NAN] * len(values)

    arr = np.asarray(values, dtype=np.float64)
    result = np.empty_like(arr)
    result[:period - 1] = np.nan

    # Per-window sum, newest bar first; no running sum
    for i in range(period - 1, len(arr)):
        window_sum = 0.0
        for j in range(period):
            window_sum += float(arr[i - j])
        result[i] = window_sum / period

    return result.tolist()


def ema(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average.

    Seeded with the mean of the first ``period`` values at index period-1,
    then ``ema[i] = (value - ema[i-1]) * k + ema[i-1]`` with
    ``k = 2 / (period + 1)``.

    Args:
        values: Sequence of price values
        period: EMA period

    Returns:
        List of EMA values (NaN for the first period-1), or an empty list
        when there are fewer values than the period
    """
    if len(values) < period:
        return []

    arr = np.asarray(values, dtype=np.float64)
    multiplier = 2.0 / (period + 1)

    result = np.empty_like(arr)
    result[:period - 1] = np.nan
    result[period - 1] = np.sum(arr[:period]) / period

    for i in range(period, len(arr)):
        result[i] = (arr[i] - result[i - 1]) * multiplier + result[i - 1]

    return result.tolist()


def ema_step(prev_ema: float, value: float, period: int) -> float:
    """Advance an EMA by one value without recomputing the series."""
    multiplier = 2.0 / (period + 1)
    return (value - prev_ema) * multiplier + prev_ema


def _rolling(values: Sequence[float], period: int, reducer) -> list[float]:
    if len(values) < period:
        return [NAN] * len(values)

    arr = np.asarray(values, dtype=np.float64)
    result = np.empty_like(arr)
    result[:period - 1] = np.nan

    for i in range(period - 1, len(arr)):
        result[i] = reducer(arr[i - period + 1 : i + 1])

    return result.tolist()


def donchian_high(highs: Sequence[float], period: int) -> list[float]:
    """
    Calculate the upper Donchian channel (rolling highest high).

    Args:
        highs: Sequence of high prices
        period: Lookback period

    Returns:
        List of highest values, NaN-padded like sma()
    """
    return _rolling(highs, period, np.max)


def donchian_low(lows: Sequence[float], period: int) -> list[float]:
    """Calculate the lower Donchian channel (rolling lowest low)."""
    return _rolling(lows, period, np.min)


def find_last_swing_high(
    highs: Sequence[float],
    left: int = 5,
    right: int = 5,
) -> float | None:
    """
    Find the most recent confirmed swing high.

    A candidate at index i is rejected if any of the ``left`` bars before it
    is strictly higher, or if any of the ``right`` bars after it is higher or
    equal. The scan runs backwards from ``len - 1 - right`` down to ``left``,
    so bars without ``right`` bars of follow-through are never considered.

    Args:
        highs: Sequence of high prices
        left: Bars required before the pivot
        right: Bars required after the pivot

    Returns:
        The pivot's high, or None if no pivot exists in range
    """
    for i in range(len(highs) - 1 - right, left - 1, -1):
        pivot = highs[i]
        if any(highs[i - j] > pivot for j in range(1, left + 1)):
            continue
        if any(highs[i + j] >= pivot for j in range(1, right + 1)):
            continue
        return pivot
    return None


def find_last_swing_low(
    lows: Sequence[float],
    left: int = 5,
    right: int = 5,
) -> float | None:
    """
    Find the most recent confirmed swing low.

    Mirror of find_last_swing_high(): a strictly lower bar on the left or a
    lower-or-equal bar on the right disqualifies the candidate.
    """
    for i in range(len(lows) - 1 - right, left - 1, -1):
        pivot = lows[i]
        if any(lows[i - j] < pivot for j in range(1, left + 1)):
            continue
        if any(lows[i + j] <= pivot for j in range(1, right + 1)):
            continue
        return pivot
    return None


def rsi(values: Sequence[float], period: int = 14) -> list[float]:
    """
    Calculate Relative Strength Index with Wilder's smoothing.

    Args:
        values: Sequence of close prices
        period: RSI period

    Returns:
        List of RSI values (NaN for the first ``period`` entries)
    """
    if len(values) <= period:
        return [NAN] * len(values)

    arr = np.asarray(values, dtype=np.float64)
    changes = np.diff(arr)

    avg_gain = float(np.sum(changes[:period][changes[:period] >= 0])) / period
    avg_loss = float(-np.sum(changes[:period][changes[:period] < 0])) / period

    result = [NAN] * period
    rs = 100.0 if avg_loss == 0 else avg_gain / avg_loss
    result.append(100.0 - 100.0 / (1.0 + rs))

    for change in changes[period:]:
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        rs = 100.0 if avg_loss == 0 else avg_gain / avg_loss
        result.append(float(100.0 - 100.0 / (1.0 + rs)))

    return result


def true_range(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> list[float]:
    """
    Calculate True Range.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))
    The first bar has no previous close and uses high - low.
    """
    n = len(highs)
    if n == 0:
        return []

    result = [highs[0] - lows[0]]

    for i in range(1, n):
        hl = highs[i] - lows[i]
        hc = abs(highs[i] - closes[i - 1])
        lc = abs(lows[i] - closes[i - 1])
        result.append(max(hl, hc, lc))

    return result


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
    skip_first: bool = False,
) -> list[float]:
    """
    Calculate Average True Range using Wilder's smoothing.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices
        period: ATR period
        skip_first: Drop the first bar's high - low range, so true ranges
            start at bar 1 and the first ATR needs period + 1 bars

    Returns:
        List of ATR values (same length as input), NaN-padded until the
        first full seed window
    """
    tr = true_range(highs, lows, closes)
    lead = 0
    if skip_first:
        tr = tr[1:]
        lead = 1

    if len(tr) < period:
        return [NAN] * len(highs)

    tr_arr = np.asarray(tr, dtype=np.float64)
    result = np.empty_like(tr_arr)
    result[:period - 1] = np.nan

    seed = 0.0
    for value in tr_arr[:period]:
        seed += float(value)
    result[period - 1] = seed / period

    for i in range(period, len(tr_arr)):
        result[i] = (result[i - 1] * (period - 1) + tr_arr[i]) / period

    return [NAN] * lead + result.tolist()
