"""Rule registry mapping strategy families to trigger rules.

Usage:
    @register_rule(StrategyFamily.MACRO_TREND)
    def macro_trend(closes, highs, lows):
        ...

    rule = get_rule(StrategyFamily.MACRO_TREND)
    families = list_families()
"""

from __future__ import annotations

import logging

from core.models.config import StrategyFamily
from core.strategy.protocol import TriggerRule

logger = logging.getLogger(__name__)

# Global registry: family -> rule
_REGISTRY: dict[StrategyFamily, TriggerRule] = {}


def register_rule(family: StrategyFamily):
    """Decorator to register a rule function for a strategy family.

    Args:
        family: Strategy family the rule implements.

    Returns:
        Decorator that registers the function and returns it unchanged.

    Raises:
        ValueError: If the family already has a rule.
    """

    def decorator(func):
        if family in _REGISTRY:
            raise ValueError(
                f"Family '{family.value}' is already registered by {_REGISTRY[family].__name__}"
            )
        _REGISTRY[family] = func
        logger.debug("Registered rule: %s -> %s", family.value, func.__name__)
        return func

    return decorator


def get_rule(family: StrategyFamily) -> TriggerRule:
    """Get the rule for a strategy family.

    Raises:
        KeyError: If no rule is registered for the family.
    """
    rule = _REGISTRY.get(family)
    if rule is None:
        available = ", ".join(sorted(f.value for f in _REGISTRY)) or "(none)"
        raise KeyError(
            f"No rule for family '{family}'. Available: {available}"
        )
    return rule


def list_families() -> list[StrategyFamily]:
    """Return registered families sorted by name."""
    return sorted(_REGISTRY, key=lambda f: f.value)
