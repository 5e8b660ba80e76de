from __future__ import annotations

from abc import ABC, abstractmethod

from tradelab.contexts.backtest.domain.entities import Position, TradingRecord
from tradelab.platform.numeric import Num, NumericPolicy
from tradelab.shared_kernel.primitives import BarSeries


class AnalysisCriterion(ABC):
    """
    Pure performance metric `(BarSeries, TradingRecord) -> Num` without mutable state.

    Open positions are unrealized and never contribute to realized-profit criteria.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.4, criteria engine)
    Related:
      - src/tradelab/contexts/backtest/application/services/criteria/total_profit.py
      - src/tradelab/contexts/backtest/application/use_cases/run_backtest.py
      - tests/unit/contexts/backtest/application/services/criteria/test_criteria.py
    """

    name: str = ""
    higher_is_better: bool = True

    @abstractmethod
    def calculate(self, series: BarSeries, record: TradingRecord) -> Num:
        """
        Compute criterion over all closed positions of a completed record.

        Args:
            series: Simulated bar series; provides the numeric policy.
            record: Completed trading record.
        Returns:
            Num: Criterion value, or its documented sentinel on degenerate input.
        Assumptions:
            Record was produced on `series`.
        Raises:
            None.
        Side Effects:
            None.
        """

    @abstractmethod
    def calculate_position(self, series: BarSeries, position: Position) -> Num:
        """Compute criterion for one position (open positions count as no trade)."""

    def better_than(self, first: Num, second: Num) -> bool:
        """Return whether `first` is a strictly better criterion value than `second`."""
        if self.higher_is_better:
            return first > second
        return first < second

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def closed_profits(*, num: NumericPolicy, record: TradingRecord) -> list[Num]:
    """Return realized profits of closed positions in record order."""
    return [position.profit(num) for position in record.positions]


def position_profit(*, num: NumericPolicy, position: Position) -> Num:
    """Return realized profit of closed position, zero for an open one."""
    if position.is_open:
        return num.zero()
    return position.profit(num)
