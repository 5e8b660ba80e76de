from __future__ import annotations

from typing import Sequence

from tradelab.contexts.backtest.domain.entities import Position, TradingRecord
from tradelab.platform.numeric import Num, NumericPolicy
from tradelab.shared_kernel.primitives import BarSeries

from .analysis_criterion import AnalysisCriterion, closed_profits, position_profit


class RewardRiskRatioCriterion(AnalysisCriterion):
    """
    Mean winning profit divided by mean losing loss magnitude.

    Sentinels: `+infinity` with at least one winner and no losers, `0` with no winners.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.4)
    Related:
      - src/tradelab/contexts/backtest/application/services/criteria/analysis_criterion.py
      - tests/unit/contexts/backtest/application/services/criteria/test_criteria.py
    """

    name = "Reward Risk Ratio"

    def calculate(self, series: BarSeries, record: TradingRecord) -> Num:
        return _reward_risk(num=series.num, profits=closed_profits(num=series.num, record=record))

    def calculate_position(self, series: BarSeries, position: Position) -> Num:
        if position.is_open:
            return series.num.zero()
        return _reward_risk(
            num=series.num,
            profits=[position_profit(num=series.num, position=position)],
        )


def _reward_risk(*, num: NumericPolicy, profits: Sequence[Num]) -> Num:
    zero = num.zero()
    wins = [profit for profit in profits if profit > zero]
    losses = [num.absolute(profit) for profit in profits if profit < zero]
    if not wins:
        return zero
    if not losses:
        return num.infinity()
    return num.divide(num.mean(wins), num.mean(losses))
