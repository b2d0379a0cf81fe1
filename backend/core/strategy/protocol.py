"""Trigger rule protocol.

This module provides:
- RuleResult: Standard return type from a family rule
- TriggerRule: Callable protocol every family rule must satisfy
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable


# ---------------------------------------------------------------------------
# RuleResult: standard return value from a family rule
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RuleResult:
    """Signals produced by one rule evaluation.

    Attributes:
        entry: Breakout condition holds.
        exit: Stop-loss / breakdown condition holds.
        take_profit: Profit-taking condition holds.
    """

    entry: bool = False
    exit: bool = False
    take_profit: bool = False


# ---------------------------------------------------------------------------
# TriggerRule Protocol
# ---------------------------------------------------------------------------
@runtime_checkable
class TriggerRule(Protocol):
    """A family rule evaluated against the full candle history.

    The last element of ``closes`` is the current (possibly still open)
    price. Rules must be pure and must not raise for short history.
    """

    def __call__(
        self,
        closes: Sequence[float],
        highs: Sequence[float],
        lows: Sequence[float],
    ) -> RuleResult:
        ...
