from __future__ import annotations

import logging
from typing import Sequence

from tradelab.contexts.backtest.application.dto import BacktestReport, RunBacktestRequest
from tradelab.contexts.backtest.application.services import (
    AnalysisCriterion,
    StrategyRunner,
    default_criteria,
)
from tradelab.contexts.backtest.application.use_cases.errors import map_backtest_exception
from tradelab.platform.errors import TradelabError

log = logging.getLogger(__name__)


class RunBacktestUseCase:
    """
    RunBacktestUseCase — simulate one strategy and evaluate configured criteria.

    Docs:
      - docs/architecture/backtest-engine.md (sections 4.3, 4.4 and 7.1)
    Related:
      - src/tradelab/contexts/backtest/application/services/strategy_runner.py
      - src/tradelab/contexts/backtest/application/dto/run_backtest.py
      - src/tradelab/contexts/backtest/application/use_cases/errors.py
    """

    def __init__(self, *, criteria: Sequence[AnalysisCriterion] | None = None) -> None:
        """
        Initialize use case with criteria evaluated after each run.

        Args:
            criteria: Criteria in report order; defaults to `default_criteria()`.
        Returns:
            None.
        Assumptions:
            Criteria are stateless and may be shared between runs.
        Raises:
            ValueError: If a criterion has wrong type or two criteria share a name.
        Side Effects:
            None.
        """
        resolved = tuple(criteria) if criteria is not None else default_criteria()
        names: set[str] = set()
        for criterion in resolved:
            if not isinstance(criterion, AnalysisCriterion):
                raise ValueError(
                    "RunBacktestUseCase.criteria items must be AnalysisCriterion, got "
                    f"{type(criterion).__name__}"
                )
            if criterion.name in names:
                raise ValueError(f"RunBacktestUseCase.criteria has duplicate {criterion.name!r}")
            names.add(criterion.name)
        self._criteria = resolved

    @property
    def criteria(self) -> tuple[AnalysisCriterion, ...]:
        return self._criteria

    def execute(self, *, request: RunBacktestRequest) -> BacktestReport:
        """
        Run strategy over request series and build report with criteria values.

        Args:
            request: Series, strategy and run parameters.
        Returns:
            BacktestReport: Positions of the run and named criteria values.
        Assumptions:
            Request strategy owns indicator instances not shared with a concurrent run.
        Raises:
            TradelabError: Canonical mapped error (`configuration_error`, `validation_error`,
                `unexpected_error`).
        Side Effects:
            Populates indicator caches, logs mapped failures at WARNING.
        """
        try:
            if request is None:  # type: ignore[truthy-bool]
                raise ValueError("RunBacktestUseCase.execute requires request")

            series = request.series
            record = StrategyRunner(series).run(
                request.strategy,
                request.params,
                request.price_indicator,
            )
            criteria_values = {
                criterion.name: criterion.calculate(series, record) for criterion in self._criteria
            }
            return BacktestReport(
                strategy_name=request.strategy.name,
                series_name=series.name,
                positions=record.positions,
                open_position=record.current_position,
                criteria=criteria_values,
            )
        except TradelabError:
            raise
        except Exception as error:  # noqa: BLE001
            mapped = map_backtest_exception(error=error)
            log.warning("backtest run failed: code=%s message=%s", mapped.code, mapped.message)
            raise mapped from error
