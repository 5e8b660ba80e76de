from __future__ import annotations

from decimal import Decimal
from typing import Sequence

import numpy as np
import pytest

from tradelab.contexts.backtest.application.services import (
    AverageProfitableTradesCriterion,
    NumberOfPositionsCriterion,
    RewardRiskRatioCriterion,
    TotalProfitCriterion,
    VersusBuyAndHoldCriterion,
    buy_and_hold_record,
    default_criteria,
)
from tradelab.contexts.backtest.domain import TradingRecord
from tradelab.platform.errors import ConfigurationError
from tradelab.platform.numeric import FloatNumericPolicy, NumericPolicy
from tradelab.shared_kernel.primitives import BarSeries, PositionSide


def _series_from_closes(
    closes: Sequence[object],
    *,
    num: NumericPolicy | None = None,
) -> BarSeries:
    rows = [
        {"timestamp": index, "open": close, "high": close, "low": close, "close": close}
        for index, close in enumerate(closes)
    ]
    return BarSeries.from_rows(name="criteria", rows=rows, num=num)


def _record_with_trades(
    series: BarSeries,
    trades: Sequence[tuple[int, int]],
    *,
    side: PositionSide = PositionSide.LONG,
    amount: object = 1,
) -> TradingRecord:
    """
    Build record with closed trades filled at close prices.

    Args:
        series: Source series.
        trades: `(entry_index, exit_index)` pairs in chronological order.
        side: Record side.
        amount: Position size.
    Returns:
        TradingRecord: Record with closed positions.
    Assumptions:
        Trades do not overlap.
    Raises:
        ValueError: If trades overlap.
    Side Effects:
        None.
    """
    record = TradingRecord(side=side)
    for entry_index, exit_index in trades:
        record.enter(
            index=entry_index,
            price=series.bar(entry_index).close,
            amount=series.num_of(amount),
        )
        record.exit(index=exit_index, price=series.bar(exit_index).close)
    return record


@pytest.fixture(name="mixed_series")
def _mixed_series_fixture() -> BarSeries:
    return _series_from_closes([100, 110, 105, 95, 100, 120])


@pytest.fixture(name="mixed_record")
def _mixed_record_fixture(mixed_series: BarSeries) -> TradingRecord:
    # profits: +10, -10, +20
    return _record_with_trades(mixed_series, [(0, 1), (2, 3), (4, 5)])


def test_criteria_on_mixed_record(mixed_series: BarSeries, mixed_record: TradingRecord) -> None:
    """
    Verify every default criterion on a winning/losing/winning sequence.

    Args:
        mixed_series: Six-bar series fixture.
        mixed_record: Record with profits `+10, -10, +20`.
    Returns:
        None.
    Assumptions:
        Buy-and-hold over the series earns `120 - 100 = 20`.
    Raises:
        AssertionError: If one criterion value differs.
    Side Effects:
        None.
    """
    assert NumberOfPositionsCriterion().calculate(mixed_series, mixed_record) == Decimal(3)
    assert TotalProfitCriterion().calculate(mixed_series, mixed_record) == Decimal(20)
    assert AverageProfitableTradesCriterion().calculate(mixed_series, mixed_record) == Decimal(
        "0.66666667"
    )
    assert RewardRiskRatioCriterion().calculate(mixed_series, mixed_record) == Decimal("1.5")
    assert VersusBuyAndHoldCriterion(TotalProfitCriterion()).calculate(
        mixed_series, mixed_record
    ) == Decimal(1)


def test_criteria_on_empty_record_return_zero(mixed_series: BarSeries) -> None:
    """
    Verify degenerate empty record yields zero for every default criterion.
    """
    record = TradingRecord()

    for criterion in default_criteria():
        assert criterion.calculate(mixed_series, record) == Decimal(0), criterion.name


def test_reward_risk_ratio_without_losses_is_infinite() -> None:
    """
    Verify all-winning record yields `+infinity` sentinel.
    """
    series = _series_from_closes([100, 110, 111, 120])
    record = _record_with_trades(series, [(0, 1), (2, 3)])

    value = RewardRiskRatioCriterion().calculate(series, record)

    assert value == Decimal("Infinity")


def test_reward_risk_ratio_without_winners_is_zero() -> None:
    """
    Verify losing-only record yields `0`, breakeven trades are neither wins nor losses.
    """
    series = _series_from_closes([100, 90, 90, 90])
    record = _record_with_trades(series, [(0, 1), (2, 3)])

    assert RewardRiskRatioCriterion().calculate(series, record) == Decimal(0)
    assert AverageProfitableTradesCriterion().calculate(series, record) == Decimal(0)


def test_open_position_does_not_contribute_to_realized_criteria(
    mixed_series: BarSeries,
) -> None:
    """
    Verify trailing open position is ignored by realized-profit criteria.
    """
    record = _record_with_trades(mixed_series, [(0, 1)])
    record.enter(index=2, price=mixed_series.bar(2).close, amount=mixed_series.num_of(1))

    assert TotalProfitCriterion().calculate(mixed_series, record) == Decimal(10)
    assert NumberOfPositionsCriterion().calculate(mixed_series, record) == Decimal(1)
    assert (
        TotalProfitCriterion().calculate_position(mixed_series, record.current_position)
        == Decimal(0)
    )


def test_short_record_profit_and_benchmark_side() -> None:
    """
    Verify short profits and short buy-and-hold benchmark.
    """
    series = _series_from_closes([100, 90, 80])
    record = _record_with_trades(series, [(0, 1)], side=PositionSide.SHORT)

    assert TotalProfitCriterion().calculate(series, record) == Decimal(10)
    # benchmark short earns 20, record earns 10
    assert VersusBuyAndHoldCriterion(TotalProfitCriterion()).calculate(series, record) == Decimal(
        "0.5"
    )


def test_versus_buy_and_hold_on_single_bar_series_is_zero() -> None:
    """
    Verify single-bar series has empty benchmark and empty record: `0 / 0 -> 0`.
    """
    series = _series_from_closes([100])

    assert buy_and_hold_record(
        series=series,
        side=PositionSide.LONG,
        amount=series.num.one(),
    ).positions == ()
    assert VersusBuyAndHoldCriterion(TotalProfitCriterion()).calculate(
        series, TradingRecord()
    ) == Decimal(0)


def test_versus_buy_and_hold_with_flat_benchmark_is_signed_infinity() -> None:
    """
    Verify non-zero numerator over zero benchmark yields signed infinity.
    """
    series = _series_from_closes([100, 110, 100])
    record = _record_with_trades(series, [(0, 1)])

    value = VersusBuyAndHoldCriterion(TotalProfitCriterion()).calculate(series, record)

    assert value == Decimal("Infinity")


@pytest.mark.parametrize("num", (None, FloatNumericPolicy()), ids=("decimal", "float"))
def test_versus_buy_and_hold_over_infinite_reward_risk_is_finite(
    num: NumericPolicy | None,
) -> None:
    """
    Verify ratio of two all-winner Reward Risk values resolves to `1`, not an error or NaN.
    """
    series = _series_from_closes([100, 101, 102, 103], num=num)
    record = _record_with_trades(series, [(0, 1)])
    criterion = VersusBuyAndHoldCriterion(RewardRiskRatioCriterion())

    value = criterion.calculate(series, record)

    assert not series.num.is_nan(value)
    assert value == 1
    assert criterion.calculate_position(series, record.positions[0]) == 1


@pytest.mark.parametrize("num", (None, FloatNumericPolicy()), ids=("decimal", "float"))
def test_versus_buy_and_hold_finite_over_infinite_is_zero(num: NumericPolicy | None) -> None:
    """
    Verify finite base value against an infinite benchmark value resolves to `0`.
    """
    series = _series_from_closes([100, 101, 101, 100, 103], num=num)
    # +1 then -1: reward risk 1, benchmark has no losses
    record = _record_with_trades(series, [(0, 1), (2, 3)])

    value = VersusBuyAndHoldCriterion(RewardRiskRatioCriterion()).calculate(series, record)

    assert value == 0


def test_versus_buy_and_hold_uses_record_amount() -> None:
    """
    Verify benchmark position size follows the first position of the record.
    """
    series = _series_from_closes([100, 110, 120])
    record = _record_with_trades(series, [(0, 1)], amount=2)

    # record: +20, benchmark with amount 2: +40
    value = VersusBuyAndHoldCriterion(TotalProfitCriterion()).calculate(series, record)

    assert value == Decimal("0.5")


def test_per_position_criteria(mixed_series: BarSeries, mixed_record: TradingRecord) -> None:
    """
    Verify per-position variants of criteria.
    """
    winner, loser, _ = mixed_record.positions

    assert TotalProfitCriterion().calculate_position(mixed_series, loser) == Decimal(-10)
    assert AverageProfitableTradesCriterion().calculate_position(mixed_series, winner) == Decimal(1)
    assert AverageProfitableTradesCriterion().calculate_position(mixed_series, loser) == Decimal(0)
    assert NumberOfPositionsCriterion().calculate_position(mixed_series, winner) == Decimal(1)
    assert RewardRiskRatioCriterion().calculate_position(mixed_series, loser) == Decimal(0)
    # benchmark over whole series: +20
    assert VersusBuyAndHoldCriterion(TotalProfitCriterion()).calculate_position(
        mixed_series, winner
    ) == Decimal("0.5")


def test_better_than_follows_criterion_direction() -> None:
    """
    Verify `better_than` uses strict comparison in criterion direction.
    """
    total_profit = TotalProfitCriterion()
    positions = NumberOfPositionsCriterion()
    versus_positions = VersusBuyAndHoldCriterion(positions)

    assert total_profit.better_than(Decimal(2), Decimal(1))
    assert not total_profit.better_than(Decimal(1), Decimal(1))
    assert positions.better_than(Decimal(1), Decimal(2))
    assert versus_positions.higher_is_better is False
    assert versus_positions.better_than(Decimal(1), Decimal(2))


def test_criteria_support_float_policy() -> None:
    """
    Verify criteria produce float values under float numeric policy.
    """
    series = _series_from_closes([100, 110, 105, 95, 100, 120], num=FloatNumericPolicy())
    record = _record_with_trades(series, [(0, 1), (2, 3), (4, 5)])

    average = AverageProfitableTradesCriterion().calculate(series, record)

    assert isinstance(average, np.float64)
    assert float(average) == pytest.approx(2.0 / 3.0)
    single_winner = _record_with_trades(series, [(0, 1)])
    assert np.isinf(RewardRiskRatioCriterion().calculate(series, single_winner))


def test_versus_buy_and_hold_requires_criterion_base() -> None:
    """
    Verify base must be an analysis criterion.
    """
    with pytest.raises(ConfigurationError):
        VersusBuyAndHoldCriterion("Total Profit")  # type: ignore[arg-type]


def test_default_criteria_names_are_unique() -> None:
    """
    Verify report criteria names.
    """
    names = [criterion.name for criterion in default_criteria()]

    assert names == [
        "Num. Trades",
        "Total Profit",
        "Average Profitable Trades",
        "Reward Risk Ratio",
        "Versus Buy And Hold",
    ]
