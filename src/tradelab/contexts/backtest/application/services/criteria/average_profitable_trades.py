from __future__ import annotations

from tradelab.contexts.backtest.domain.entities import Position, TradingRecord
from tradelab.platform.numeric import Num
from tradelab.shared_kernel.primitives import BarSeries

from .analysis_criterion import AnalysisCriterion, closed_profits, position_profit


class AverageProfitableTradesCriterion(AnalysisCriterion):
    """
    Share of closed positions with strictly positive profit.

    Returns `0` when the record has no closed positions; breakeven positions are not profitable.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.4)
    Related:
      - src/tradelab/contexts/backtest/application/services/criteria/analysis_criterion.py
    """

    name = "Average Profitable Trades"

    def calculate(self, series: BarSeries, record: TradingRecord) -> Num:
        num = series.num
        profits = closed_profits(num=num, record=record)
        if not profits:
            return num.zero()
        winners = sum(1 for profit in profits if profit > num.zero())
        return num.divide(num.of(winners), num.of(len(profits)))

    def calculate_position(self, series: BarSeries, position: Position) -> Num:
        num = series.num
        if position_profit(num=num, position=position) > num.zero():
            return num.one()
        return num.zero()
