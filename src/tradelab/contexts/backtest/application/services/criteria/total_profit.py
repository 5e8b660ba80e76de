from __future__ import annotations

from tradelab.contexts.backtest.domain.entities import Position, TradingRecord
from tradelab.platform.numeric import Num
from tradelab.shared_kernel.primitives import BarSeries

from .analysis_criterion import AnalysisCriterion, closed_profits, position_profit


class TotalProfitCriterion(AnalysisCriterion):
    """Sum of realized profits `(exit - entry) * amount * side.sign`; `0` on empty record."""

    name = "Total Profit"

    def calculate(self, series: BarSeries, record: TradingRecord) -> Num:
        return series.num.total(closed_profits(num=series.num, record=record))

    def calculate_position(self, series: BarSeries, position: Position) -> Num:
        return position_profit(num=series.num, position=position)
