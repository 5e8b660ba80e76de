from __future__ import annotations

from tradelab.contexts.backtest.domain.entities import Position, TradingRecord
from tradelab.platform.numeric import Num
from tradelab.shared_kernel.primitives import BarSeries

from .analysis_criterion import AnalysisCriterion


class NumberOfPositionsCriterion(AnalysisCriterion):
    """Count of closed positions; fewer trades is better."""

    name = "Num. Trades"
    higher_is_better = False

    def calculate(self, series: BarSeries, record: TradingRecord) -> Num:
        return series.num.of(record.position_count)

    def calculate_position(self, series: BarSeries, position: Position) -> Num:
        if position.is_open:
            return series.num.zero()
        return series.num.one()
