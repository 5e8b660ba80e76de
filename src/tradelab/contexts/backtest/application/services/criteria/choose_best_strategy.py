from __future__ import annotations

import logging
from typing import Sequence

from tradelab.contexts.backtest.domain.value_objects import ExecutionParams
from tradelab.contexts.strategy.domain.entities import Strategy
from tradelab.platform.errors import configuration_error
from tradelab.shared_kernel.primitives import BarSeries

from ..strategy_runner import StrategyRunner
from .analysis_criterion import AnalysisCriterion

log = logging.getLogger(__name__)


def choose_best_strategy(
    *,
    series: BarSeries,
    strategies: Sequence[Strategy],
    criterion: AnalysisCriterion,
    params: ExecutionParams | None = None,
) -> Strategy:
    """
    Run every strategy on the series and return the best one under `criterion`.

    Args:
        series: Bar series shared by all strategies.
        strategies: Candidate strategies with independent indicator instances.
        criterion: Criterion deciding "better" via `better_than`.
        params: Run parameters applied to every candidate.
    Returns:
        Strategy: Best candidate; the earliest one wins ties.
    Assumptions:
        Candidates are evaluated sequentially in the given order.
    Raises:
        ConfigurationError: If there are no candidates or a candidate is invalid for the series.
    Side Effects:
        Populates indicator caches of every candidate.
    """
    if len(strategies) == 0:
        raise configuration_error(
            path="strategies",
            message="choose_best_strategy requires at least one strategy",
        )

    runner = StrategyRunner(series)
    best_strategy = strategies[0]
    best_value = criterion.calculate(series, runner.run(best_strategy, params))
    log.debug("candidate strategy=%s %s=%s", best_strategy.name, criterion.name, best_value)
    for strategy in strategies[1:]:
        value = criterion.calculate(series, runner.run(strategy, params))
        log.debug("candidate strategy=%s %s=%s", strategy.name, criterion.name, value)
        if criterion.better_than(value, best_value):
            best_strategy = strategy
            best_value = value
    return best_strategy
