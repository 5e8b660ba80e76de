from .analysis_criterion import AnalysisCriterion
from .average_profitable_trades import AverageProfitableTradesCriterion
from .choose_best_strategy import choose_best_strategy
from .number_of_positions import NumberOfPositionsCriterion
from .reward_risk_ratio import RewardRiskRatioCriterion
from .total_profit import TotalProfitCriterion
from .versus_buy_and_hold import VersusBuyAndHoldCriterion, buy_and_hold_record


def default_criteria() -> tuple[AnalysisCriterion, ...]:
    """Return criteria reported for every run, in report order."""
    return (
        NumberOfPositionsCriterion(),
        TotalProfitCriterion(),
        AverageProfitableTradesCriterion(),
        RewardRiskRatioCriterion(),
        VersusBuyAndHoldCriterion(TotalProfitCriterion()),
    )


__all__ = [
    "AnalysisCriterion",
    "AverageProfitableTradesCriterion",
    "NumberOfPositionsCriterion",
    "RewardRiskRatioCriterion",
    "TotalProfitCriterion",
    "VersusBuyAndHoldCriterion",
    "buy_and_hold_record",
    "choose_best_strategy",
    "default_criteria",
]
