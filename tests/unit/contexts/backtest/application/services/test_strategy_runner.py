from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Sequence

import pytest

from tradelab.contexts.backtest.application.services import StrategyRunner
from tradelab.contexts.backtest.domain import EndOfSeriesPolicy, ExecutionParams
from tradelab.contexts.indicators.domain.indicators import (
    CachedIndicator,
    ClosePriceIndicator,
    SMAIndicator,
)
from tradelab.contexts.strategy.domain import (
    CrossedUpIndicatorRule,
    Rule,
    SmaCrossoverParams,
    StopLossRule,
    Strategy,
)
from tradelab.contexts.strategy.application import build_sma_crossover_strategy
from tradelab.platform.errors import ConfigurationError
from tradelab.shared_kernel.primitives import BarSeries, PositionSide


class _ScriptedRule(Rule):
    """
    Rule stub satisfied at scripted indices (or always) and recording visited indices.
    """

    def __init__(
        self,
        *,
        satisfied_at: Iterable[int] | None = None,
        indicators: tuple[CachedIndicator, ...] = (),
    ) -> None:
        self._satisfied_at = None if satisfied_at is None else frozenset(satisfied_at)
        self._indicators = indicators
        self.calls: list[int] = []

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        self.calls.append(index)
        return self._satisfied_at is None or index in self._satisfied_at

    def indicators(self) -> tuple[CachedIndicator, ...]:
        return self._indicators


def _series_from_closes(closes: Sequence[object], *, name: str = "runner") -> BarSeries:
    rows = [
        {"timestamp": index, "open": close, "high": close, "low": close, "close": close}
        for index, close in enumerate(closes)
    ]
    return BarSeries.from_rows(name=name, rows=rows)


def _never() -> _ScriptedRule:
    return _ScriptedRule(satisfied_at=())


def _always() -> _ScriptedRule:
    return _ScriptedRule()


def test_runner_force_closes_crossover_position_at_last_bar() -> None:
    """
    Verify SMA crossover entry at index 29 is force-closed at the last bar.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Closes rise strictly, so the short average never crosses back down.
    Raises:
        AssertionError: If trade boundaries differ.
    Side Effects:
        None.
    """
    series = _series_from_closes(range(100, 140))
    strategy = build_sma_crossover_strategy(
        series=series,
        params=SmaCrossoverParams(
            entry_price_threshold=None,
            stop_loss_pct=None,
            stop_gain_pct=None,
        ),
    )

    record = StrategyRunner(series).run(strategy)

    assert record.is_closed
    assert len(record.positions) == 1
    position = record.positions[0]
    assert (position.entry_index, position.entry_price) == (29, Decimal(129))
    assert (position.exit_index, position.exit_price) == (39, Decimal(139))


def test_runner_leave_open_policy_keeps_trailing_position() -> None:
    """
    Verify `LEAVE_OPEN` reports trailing position as open.
    """
    series = _series_from_closes(range(100, 140))
    strategy = build_sma_crossover_strategy(
        series=series,
        params=SmaCrossoverParams(
            entry_price_threshold=None,
            stop_loss_pct=None,
            stop_gain_pct=None,
        ),
    )

    record = StrategyRunner(series).run(
        strategy,
        ExecutionParams(end_of_series_policy=EndOfSeriesPolicy.LEAVE_OPEN),
    )

    assert record.positions == ()
    assert record.current_position is not None
    assert record.current_position.entry_index == 29


def test_runner_visits_every_bar_once_in_ascending_order() -> None:
    """
    Verify FLAT runner evaluates entry rule exactly once per bar in order.
    """
    series = _series_from_closes([1, 2, 3, 4, 5])
    entry = _never()
    exit_rule = _never()

    StrategyRunner(series).run(Strategy(name="spy", entry_rule=entry, exit_rule=exit_rule))

    assert entry.calls == [0, 1, 2, 3, 4]
    assert exit_rule.calls == []


def test_runner_alternates_entries_and_exits_with_one_operation_per_bar() -> None:
    """
    Verify always-true rules produce entry/exit pairs on consecutive bars.
    """
    series = _series_from_closes([1, 2, 3, 4, 5, 6])

    record = StrategyRunner(series).run(
        Strategy(name="always", entry_rule=_always(), exit_rule=_always())
    )

    assert [(p.entry_index, p.exit_index) for p in record.positions] == [(0, 1), (2, 3), (4, 5)]
    assert record.current_position is None


def test_runner_keeps_position_entered_on_last_bar_open() -> None:
    """
    Verify position entered on the last visited bar cannot be force-closed on the same bar.
    """
    series = _series_from_closes([1, 2, 3, 4, 5])

    record = StrategyRunner(series).run(
        Strategy(name="always", entry_rule=_always(), exit_rule=_always())
    )

    assert len(record.positions) == 2
    assert record.current_position is not None
    assert record.current_position.entry_index == 4


def test_runner_exits_on_stop_loss() -> None:
    """
    Verify 3% stop-loss closes position entered at `101` once close reaches `<= 97.97`.
    """
    series = _series_from_closes([99, 101, 100, 98, "97.9", 97, 96])
    close = ClosePriceIndicator(series)
    strategy = Strategy(
        name="stop",
        entry_rule=CrossedUpIndicatorRule(close, 100),
        exit_rule=StopLossRule(close, 3),
    )

    record = StrategyRunner(series).run(strategy)

    assert [(p.entry_index, p.exit_index) for p in record.positions] == [(1, 4)]
    assert record.positions[0].exit_price == Decimal("97.9")


def test_runner_rejects_strategy_bound_to_other_series_before_first_bar() -> None:
    """
    Verify series binding check happens before any rule evaluation.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Rule stub records every evaluation.
    Raises:
        AssertionError: If a rule was evaluated or error is missing.
    Side Effects:
        None.
    """
    simulated = _series_from_closes([1, 2, 3], name="simulated")
    other = _series_from_closes([1, 2, 3], name="other")
    entry = _ScriptedRule(indicators=(ClosePriceIndicator(other),))

    with pytest.raises(ConfigurationError, match="other"):
        StrategyRunner(simulated).run(Strategy(name="x", entry_rule=entry, exit_rule=_never()))

    assert entry.calls == []


@pytest.mark.parametrize(
    "params",
    (
        ExecutionParams(start_index=3),
        ExecutionParams(finish_index=7),
    ),
)
def test_runner_rejects_range_outside_series(params: ExecutionParams) -> None:
    """
    Verify out-of-range sub-range is a configuration error raised before evaluation.
    """
    series = _series_from_closes([1, 2, 3])
    entry = _always()

    with pytest.raises(ConfigurationError):
        StrategyRunner(series).run(Strategy(name="x", entry_rule=entry, exit_rule=_never()), params)

    assert entry.calls == []


@pytest.mark.parametrize("amount", (Decimal("0.000000001"), float("inf")))
def test_runner_rejects_amount_not_positive_after_conversion(amount: object) -> None:
    """
    Verify amount rounding to zero or infinite under the series policy fails before first bar.
    """
    series = _series_from_closes([1, 2, 3])
    entry = _always()

    with pytest.raises(ConfigurationError) as error_info:
        StrategyRunner(series).run(
            Strategy(name="x", entry_rule=entry, exit_rule=_never()),
            ExecutionParams(amount=amount),
        )

    assert error_info.value.errors[0]["path"] == "execution.amount"
    assert entry.calls == []


def test_runner_rejects_invalid_inputs() -> None:
    """
    Verify runner input type and price indicator binding checks.
    """
    series = _series_from_closes([1, 2, 3])
    strategy = Strategy(name="x", entry_rule=_always(), exit_rule=_always())
    foreign_price = ClosePriceIndicator(_series_from_closes([1, 2, 3], name="foreign"))

    with pytest.raises(ConfigurationError):
        StrategyRunner([1, 2, 3])  # type: ignore[arg-type]
    with pytest.raises(ConfigurationError):
        StrategyRunner(series).run("strategy")  # type: ignore[arg-type]
    with pytest.raises(ConfigurationError):
        StrategyRunner(series).run(strategy, {"amount": 1})  # type: ignore[arg-type]
    with pytest.raises(ConfigurationError, match="price_indicator"):
        StrategyRunner(series).run(strategy, price_indicator=foreign_price)


def test_runner_visits_only_configured_sub_range() -> None:
    """
    Verify `[start_index, finish_index]` bounds the pass and the force close.
    """
    series = _series_from_closes([1, 2, 3, 4, 5, 6])
    entry = _ScriptedRule(satisfied_at={1})
    exit_rule = _never()

    record = StrategyRunner(series).run(
        Strategy(name="range", entry_rule=entry, exit_rule=exit_rule),
        ExecutionParams(start_index=1, finish_index=4),
    )

    assert entry.calls == [1]
    assert exit_rule.calls == [2, 3, 4]
    assert [(p.entry_index, p.exit_index) for p in record.positions] == [(1, 4)]
    assert record.positions[0].exit_price == Decimal(5)


def test_runner_applies_side_and_amount() -> None:
    """
    Verify short side and amount are applied to every opened position.
    """
    series = _series_from_closes([100, 90])

    record = StrategyRunner(series).run(
        Strategy(name="short", entry_rule=_always(), exit_rule=_always()),
        ExecutionParams(side=PositionSide.SHORT, amount=2),
    )

    position = record.positions[0]
    assert record.side is PositionSide.SHORT
    assert position.side is PositionSide.SHORT
    assert position.amount == Decimal(2)
    assert position.profit(series.num) == Decimal(20)


def test_runner_returns_empty_record_for_empty_series(caplog: pytest.LogCaptureFixture) -> None:
    """
    Verify empty series produces empty record without evaluating rules.
    """
    series = BarSeries(name="empty", bars=())
    entry = _always()
    caplog.set_level(logging.INFO)

    record = StrategyRunner(series).run(Strategy(name="x", entry_rule=entry, exit_rule=_always()))

    assert record.positions == ()
    assert record.current_position is None
    assert entry.calls == []
    assert "is empty" in caplog.text


def test_runner_skips_operations_while_fill_price_is_unstable() -> None:
    """
    Verify NaN fill price from warming-up price indicator skips the entry.
    """
    series = _series_from_closes([1, 2, 3, 4, 5])
    price = SMAIndicator(ClosePriceIndicator(series), 3)

    record = StrategyRunner(series).run(
        Strategy(name="sma-fill", entry_rule=_always(), exit_rule=_never()),
        price_indicator=price,
    )

    assert len(record.positions) == 1
    position = record.positions[0]
    assert (position.entry_index, position.entry_price) == (2, Decimal(2))
    assert (position.exit_index, position.exit_price) == (4, Decimal(4))


def test_runner_honors_strategy_unstable_bars() -> None:
    """
    Verify no entry happens inside the strategy unstable prefix.
    """
    series = _series_from_closes([1, 2, 3, 4])

    record = StrategyRunner(series).run(
        Strategy(name="warm", entry_rule=_always(), exit_rule=_never(), unstable_bars=2),
        ExecutionParams(end_of_series_policy="leave_open"),  # type: ignore[arg-type]
    )

    assert record.current_position is not None
    assert record.current_position.entry_index == 2
