from .dto import BacktestReport, RunBacktestRequest
from .services import (
    AnalysisCriterion,
    AverageProfitableTradesCriterion,
    NumberOfPositionsCriterion,
    RewardRiskRatioCriterion,
    StrategyRunner,
    TotalProfitCriterion,
    VersusBuyAndHoldCriterion,
    choose_best_strategy,
    default_criteria,
)
from .use_cases import RunBacktestUseCase, map_backtest_exception

__all__ = [
    "AnalysisCriterion",
    "AverageProfitableTradesCriterion",
    "BacktestReport",
    "NumberOfPositionsCriterion",
    "RewardRiskRatioCriterion",
    "RunBacktestRequest",
    "RunBacktestUseCase",
    "StrategyRunner",
    "TotalProfitCriterion",
    "VersusBuyAndHoldCriterion",
    "choose_best_strategy",
    "default_criteria",
    "map_backtest_exception",
]
