from .entities import Strategy
from .rules import (
    AndRule,
    CrossedDownIndicatorRule,
    CrossedUpIndicatorRule,
    OrRule,
    Rule,
    StopGainRule,
    StopLossRule,
)
from .value_objects import SmaCrossoverParams

__all__ = [
    "AndRule",
    "CrossedDownIndicatorRule",
    "CrossedUpIndicatorRule",
    "OrRule",
    "Rule",
    "SmaCrossoverParams",
    "StopGainRule",
    "StopLossRule",
    "Strategy",
]
