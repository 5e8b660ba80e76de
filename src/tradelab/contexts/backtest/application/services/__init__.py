from .criteria import (
    AnalysisCriterion,
    AverageProfitableTradesCriterion,
    NumberOfPositionsCriterion,
    RewardRiskRatioCriterion,
    TotalProfitCriterion,
    VersusBuyAndHoldCriterion,
    buy_and_hold_record,
    choose_best_strategy,
    default_criteria,
)
from .strategy_runner import StrategyRunner

__all__ = [
    "AnalysisCriterion",
    "AverageProfitableTradesCriterion",
    "NumberOfPositionsCriterion",
    "RewardRiskRatioCriterion",
    "StrategyRunner",
    "TotalProfitCriterion",
    "VersusBuyAndHoldCriterion",
    "buy_and_hold_record",
    "choose_best_strategy",
    "default_criteria",
]
