from __future__ import annotations

from typing import Iterable, Sequence

import pytest

from tradelab.contexts.backtest.application.services import (
    NumberOfPositionsCriterion,
    TotalProfitCriterion,
    choose_best_strategy,
)
from tradelab.contexts.indicators.domain.indicators import CachedIndicator
from tradelab.contexts.strategy.domain import Rule, Strategy
from tradelab.platform.errors import ConfigurationError
from tradelab.shared_kernel.primitives import BarSeries


class _IndexRule(Rule):
    def __init__(self, satisfied_at: Iterable[int]) -> None:
        self._satisfied_at = frozenset(satisfied_at)

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        return index in self._satisfied_at

    def indicators(self) -> tuple[CachedIndicator, ...]:
        return ()


def _series_from_closes(closes: Sequence[object]) -> BarSeries:
    rows = [
        {"timestamp": index, "open": close, "high": close, "low": close, "close": close}
        for index, close in enumerate(closes)
    ]
    return BarSeries.from_rows(name="best", rows=rows)


def _strategy(name: str, *, entries: Iterable[int], exits: Iterable[int]) -> Strategy:
    return Strategy(name=name, entry_rule=_IndexRule(entries), exit_rule=_IndexRule(exits))


@pytest.fixture(name="series")
def _series_fixture() -> BarSeries:
    return _series_from_closes([100, 105, 103, 110, 108, 120])


def test_choose_best_strategy_by_total_profit(series: BarSeries) -> None:
    """
    Verify candidate with the highest total profit wins.

    Args:
        series: Six-bar series fixture.
    Returns:
        None.
    Assumptions:
        `idle` never trades, `swing` earns `+5 +7 +12`, `hold` earns `+20`.
    Raises:
        AssertionError: If a different candidate is chosen.
    Side Effects:
        None.
    """
    idle = _strategy("idle", entries=(), exits=())
    swing = _strategy("swing", entries=(0, 2, 4), exits=(1, 3, 5))
    hold = _strategy("hold", entries=(0,), exits=(5,))

    best = choose_best_strategy(
        series=series,
        strategies=[idle, hold, swing],
        criterion=TotalProfitCriterion(),
    )

    assert best is swing


def test_choose_best_strategy_respects_lower_is_better(series: BarSeries) -> None:
    """
    Verify criterion with `higher_is_better=False` prefers fewer trades.
    """
    swing = _strategy("swing", entries=(0, 2, 4), exits=(1, 3, 5))
    hold = _strategy("hold", entries=(0,), exits=(5,))

    best = choose_best_strategy(
        series=series,
        strategies=(swing, hold),
        criterion=NumberOfPositionsCriterion(),
    )

    assert best is hold


def test_choose_best_strategy_keeps_earliest_on_tie(series: BarSeries) -> None:
    """
    Verify ties are resolved in favor of the earliest candidate.
    """
    first = _strategy("first", entries=(0,), exits=(5,))
    second = _strategy("second", entries=(0,), exits=(5,))

    best = choose_best_strategy(
        series=series,
        strategies=[first, second],
        criterion=TotalProfitCriterion(),
    )

    assert best is first


def test_choose_best_strategy_requires_candidates(series: BarSeries) -> None:
    """
    Verify empty candidate list is a configuration error.
    """
    with pytest.raises(ConfigurationError) as error_info:
        choose_best_strategy(series=series, strategies=[], criterion=TotalProfitCriterion())

    assert error_info.value.errors[0]["path"] == "strategies"
