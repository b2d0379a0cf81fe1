"""Trigger rule system.

Public API:
- TriggerRule: Protocol that all family rules must implement
- RuleResult: Standard return type from a rule
- register_rule: Decorator to register a rule for a strategy family
- get_rule: Look up the rule of a family
- list_families: Discover all families with a registered rule
- evaluate_triggers: Run the loading/insufficient/ready state machine

Importing this package auto-registers all built-in rules.
"""

from core.strategy.protocol import RuleResult, TriggerRule
from core.strategy.registry import get_rule, list_families, register_rule
from core.strategy.evaluator import MIN_CANDLES, evaluate_triggers

# Import built-in rules to trigger auto-registration
import core.strategy.rules  # noqa: F401

__all__ = [
    "RuleResult",
    "TriggerRule",
    "register_rule",
    "get_rule",
    "list_families",
    "MIN_CANDLES",
    "evaluate_triggers",
]
