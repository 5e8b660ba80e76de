from .crossed_indicator_rules import CrossedDownIndicatorRule, CrossedUpIndicatorRule
from .rule import AndRule, OrRule, Rule, ensure_single_series
from .stop_rules import StopGainRule, StopLossRule

__all__ = [
    "AndRule",
    "CrossedDownIndicatorRule",
    "CrossedUpIndicatorRule",
    "OrRule",
    "Rule",
    "StopGainRule",
    "StopLossRule",
    "ensure_single_series",
]
