from __future__ import annotations

import math

from tradelab.contexts.backtest.domain.entities import Position, TradingRecord
from tradelab.platform.errors import configuration_error
from tradelab.platform.numeric import Num, NumericPolicy
from tradelab.shared_kernel.primitives import BarSeries, PositionSide

from .analysis_criterion import AnalysisCriterion


class VersusBuyAndHoldCriterion(AnalysisCriterion):
    """
    Ratio of a base criterion on the record to the same criterion on buy-and-hold.

    Buy-and-hold is one position entered at the first bar close and exited at the last bar close,
    with the record side and the amount of the record's first position (`1` when it never
    traded). Zero denominator: `0` when the numerator is also `0`, signed infinity otherwise.
    Infinite denominator (e.g. Reward Risk of all-winner records): `1` when the numerator is
    infinite with the same sign, `-1` for the opposite sign, `0` for a finite numerator.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.4)
    Related:
      - src/tradelab/contexts/backtest/application/services/criteria/total_profit.py
      - tests/unit/contexts/backtest/application/services/criteria/test_criteria.py
    """

    name = "Versus Buy And Hold"

    def __init__(self, base: AnalysisCriterion) -> None:
        if not isinstance(base, AnalysisCriterion):
            raise configuration_error(
                path="VersusBuyAndHoldCriterion.base",
                message=(
                    "VersusBuyAndHoldCriterion.base must be an AnalysisCriterion, got "
                    f"{type(base).__name__}"
                ),
            )
        self._base = base
        self.higher_is_better = base.higher_is_better

    @property
    def base(self) -> AnalysisCriterion:
        return self._base

    def calculate(self, series: BarSeries, record: TradingRecord) -> Num:
        first = record.positions[0] if record.positions else record.current_position
        amount = first.amount if first is not None else series.num.one()
        benchmark = buy_and_hold_record(series=series, side=record.side, amount=amount)
        return _ratio(
            num=series.num,
            numerator=self._base.calculate(series, record),
            denominator=self._base.calculate(series, benchmark),
        )

    def calculate_position(self, series: BarSeries, position: Position) -> Num:
        benchmark = buy_and_hold_record(series=series, side=position.side, amount=position.amount)
        benchmark_position = benchmark.last_position
        if benchmark_position is None:
            denominator = series.num.zero()
        else:
            denominator = self._base.calculate_position(series, benchmark_position)
        return _ratio(
            num=series.num,
            numerator=self._base.calculate_position(series, position),
            denominator=denominator,
        )

    def __repr__(self) -> str:
        return f"VersusBuyAndHoldCriterion({self._base!r})"


def buy_and_hold_record(*, series: BarSeries, side: PositionSide, amount: Num) -> TradingRecord:
    """
    Build benchmark record holding one position over the whole series.

    Args:
        series: Bar series.
        side: Position side of the benchmark.
        amount: Position size.
    Returns:
        TradingRecord: One closed position, or an empty record for series shorter than 2 bars.
    Assumptions:
        Entry and exit fill at close prices.
    Raises:
        None.
    Side Effects:
        None.
    """
    record = TradingRecord(side=side)
    if series.bar_count < 2:
        return record
    record.enter(
        index=series.begin_index,
        price=series.bar(series.begin_index).close,
        amount=amount,
    )
    record.exit(index=series.end_index, price=series.bar(series.end_index).close)
    return record


def _ratio(*, num: NumericPolicy, numerator: Num, denominator: Num) -> Num:
    zero = num.zero()
    if math.isinf(denominator):
        if not math.isinf(numerator):
            return zero
        same_sign = (numerator < zero) == (denominator < zero)
        return num.one() if same_sign else num.subtract(zero, num.one())
    if denominator == zero:
        if numerator == zero:
            return zero
        return num.infinity(negative=numerator < zero)
    return num.divide(numerator, denominator)
