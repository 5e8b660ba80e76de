from __future__ import annotations

from tradelab.contexts.indicators.domain.indicators import ClosePriceIndicator, SMAIndicator
from tradelab.contexts.strategy.domain.entities import Strategy
from tradelab.contexts.strategy.domain.rules import (
    CrossedDownIndicatorRule,
    CrossedUpIndicatorRule,
    Rule,
    StopGainRule,
    StopLossRule,
)
from tradelab.contexts.strategy.domain.value_objects import SmaCrossoverParams
from tradelab.shared_kernel.primitives import BarSeries

SMA_CROSSOVER_STRATEGY_NAME = "sma_crossover"


def build_sma_crossover_strategy(
    *,
    series: BarSeries,
    params: SmaCrossoverParams | None = None,
    name: str = SMA_CROSSOVER_STRATEGY_NAME,
) -> Strategy:
    """
    Build SMA crossover strategy with fresh indicator instances bound to `series`.

    Entry: short SMA crosses up long SMA, or close crosses down `entry_price_threshold`.
    Exit: short SMA crosses down long SMA, or stop-loss, or stop-gain.

    Args:
        series: Bar series the indicators are bound to.
        params: Strategy parameters; defaults to `SmaCrossoverParams()`.
        name: Strategy name reported by the run.
    Returns:
        Strategy: Strategy with private indicator caches.
    Assumptions:
        Each call creates new indicators, so strategies built by separate calls can be evaluated
        independently.
    Raises:
        ConfigurationError: If series or params are invalid.
    Side Effects:
        None.
    """
    effective_params = params if params is not None else SmaCrossoverParams()

    close_price = ClosePriceIndicator(series)
    short_sma = SMAIndicator(close_price, effective_params.short_window)
    long_sma = SMAIndicator(close_price, effective_params.long_window)

    entry_rule: Rule = CrossedUpIndicatorRule(short_sma, long_sma)
    if effective_params.entry_price_threshold is not None:
        entry_rule = entry_rule.or_(
            CrossedDownIndicatorRule(close_price, effective_params.entry_price_threshold)
        )

    exit_rule: Rule = CrossedDownIndicatorRule(short_sma, long_sma)
    if effective_params.stop_loss_pct is not None:
        exit_rule = exit_rule.or_(StopLossRule(close_price, effective_params.stop_loss_pct))
    if effective_params.stop_gain_pct is not None:
        exit_rule = exit_rule.or_(StopGainRule(close_price, effective_params.stop_gain_pct))

    return Strategy(name=name, entry_rule=entry_rule, exit_rule=exit_rule)
