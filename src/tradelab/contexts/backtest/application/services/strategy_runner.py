from __future__ import annotations

import logging
import math

from tradelab.contexts.backtest.domain.entities import TradingRecord
from tradelab.contexts.backtest.domain.value_objects import EndOfSeriesPolicy, ExecutionParams
from tradelab.contexts.indicators.domain.indicators import CachedIndicator, ClosePriceIndicator
from tradelab.contexts.strategy.domain.entities import Strategy
from tradelab.platform.errors import configuration_error
from tradelab.platform.numeric import Num
from tradelab.shared_kernel.primitives import BarSeries

log = logging.getLogger(__name__)


class StrategyRunner:
    """
    Single forward pass of a strategy over one bar series, producing a trading record.

    Two states per bar: FLAT checks the entry rule, IN_POSITION checks the exit rule on bars
    strictly after the entry bar. At most one operation happens per bar, fills use
    `price_indicator` (close price by default).

    Docs:
      - docs/architecture/backtest-engine.md (section 4.3, strategy runner)
    Related:
      - src/tradelab/contexts/strategy/domain/entities/strategy.py
      - src/tradelab/contexts/backtest/domain/entities/trading_record.py
      - tests/unit/contexts/backtest/application/services/test_strategy_runner.py
    """

    def __init__(self, series: BarSeries) -> None:
        if not isinstance(series, BarSeries):
            raise configuration_error(
                path="StrategyRunner.series",
                message=f"StrategyRunner requires a BarSeries, got {type(series).__name__}",
            )
        self._series = series

    @property
    def series(self) -> BarSeries:
        return self._series

    def run(
        self,
        strategy: Strategy,
        params: ExecutionParams | None = None,
        price_indicator: CachedIndicator | None = None,
    ) -> TradingRecord:
        """
        Simulate strategy and return the completed trading record.

        Args:
            strategy: Strategy whose rules are bound to the runner series.
            params: Run parameters; defaults to `ExecutionParams()`.
            price_indicator: Fill price source; defaults to close price of the series.
        Returns:
            TradingRecord: Closed positions plus the trailing open position, if any.
        Assumptions:
            Indicator caches of `strategy` are not shared with a concurrent run.
        Raises:
            ConfigurationError: If strategy, params or price indicator are invalid or bound to
                another series, or the sub-range lies outside the series. Raised before the
                first bar is visited.
        Side Effects:
            Populates indicator caches and emits INFO/DEBUG logs.
        """
        effective_params = params if params is not None else ExecutionParams()
        self._validate_bindings(
            strategy=strategy,
            params=effective_params,
            price_indicator=price_indicator,
        )
        price = (
            price_indicator
            if price_indicator is not None
            else ClosePriceIndicator(self._series)
        )
        amount = self._resolve_amount(params=effective_params)
        record = TradingRecord(side=effective_params.side)

        if self._series.is_empty:
            log.info(
                "strategy run skipped: strategy=%s series=%s is empty",
                strategy.name,
                self._series.name,
            )
            return record

        start_index, finish_index = self._resolve_range(params=effective_params)
        log.info(
            "strategy run started: strategy=%s series=%s side=%s range=[%s, %s]",
            strategy.name,
            self._series.name,
            effective_params.side.value,
            start_index,
            finish_index,
        )

        num = self._series.num
        for index in range(start_index, finish_index + 1):
            position = record.current_position
            if position is None:
                if not strategy.should_enter(index, record):
                    continue
                fill_price = price.value(index)
                if num.is_nan(fill_price):
                    log.debug("entry skipped at index=%s: fill price is unstable", index)
                    continue
                record.enter(index=index, price=fill_price, amount=amount)
                log.debug("entered %s at index=%s price=%s", record.side.value, index, fill_price)
            elif index > position.entry_index and strategy.should_exit(index, record):
                fill_price = price.value(index)
                if num.is_nan(fill_price):
                    log.debug("exit skipped at index=%s: fill price is unstable", index)
                    continue
                record.exit(index=index, price=fill_price)
                log.debug("exited %s at index=%s price=%s", record.side.value, index, fill_price)

        self._apply_end_of_series_policy(
            record=record,
            policy=effective_params.end_of_series_policy,
            finish_index=finish_index,
            finish_price=price.value(finish_index),
        )
        log.info(
            "strategy run finished: strategy=%s closed_positions=%s open=%s",
            strategy.name,
            record.position_count,
            not record.is_closed,
        )
        return record

    def _validate_bindings(
        self,
        *,
        strategy: object,
        params: object,
        price_indicator: object,
    ) -> None:
        """
        Validate run inputs before the pass starts.

        Raises:
            ConfigurationError: If one input has a wrong type or another series.
        """
        if not isinstance(strategy, Strategy):
            raise configuration_error(
                path="StrategyRunner.strategy",
                message=f"strategy must be a Strategy, got {type(strategy).__name__}",
            )
        if not isinstance(params, ExecutionParams):
            raise configuration_error(
                path="StrategyRunner.params",
                message=f"params must be ExecutionParams, got {type(params).__name__}",
            )
        for indicator in strategy.indicators():
            if indicator.series is not self._series:
                raise configuration_error(
                    path="StrategyRunner.strategy",
                    message=(
                        f"strategy {strategy.name!r} reads indicator bound to series "
                        f"{indicator.series.name!r}, runner simulates {self._series.name!r}"
                    ),
                )
        if price_indicator is None:
            return
        if not isinstance(price_indicator, CachedIndicator):
            raise configuration_error(
                path="StrategyRunner.price_indicator",
                message=(
                    "price_indicator must be an indicator, got "
                    f"{type(price_indicator).__name__}"
                ),
            )
        if price_indicator.series is not self._series:
            raise configuration_error(
                path="StrategyRunner.price_indicator",
                message=(
                    f"price_indicator is bound to series {price_indicator.series.name!r}, "
                    f"runner simulates {self._series.name!r}"
                ),
            )

    def _resolve_amount(self, *, params: ExecutionParams) -> Num:
        """
        Convert position size with the series numeric policy.

        Raises:
            ConfigurationError: If converted amount is not a positive finite number, e.g. it
                rounds to zero under the decimal scale.
        """
        num = self._series.num
        amount = num.of(params.amount)
        if num.is_nan(amount) or math.isinf(amount) or amount <= num.zero():
            raise configuration_error(
                path="execution.amount",
                message=(
                    f"execution.amount {params.amount} converts to {amount} under "
                    f"{num.mode} numeric policy, expected a positive finite value"
                ),
            )
        return amount

    def _resolve_range(self, *, params: ExecutionParams) -> tuple[int, int]:
        """
        Resolve inclusive `[start, finish]` visit range.

        Raises:
            ConfigurationError: If a bound lies outside the series.
        """
        end_index = self._series.end_index
        start_index = (
            self._series.begin_index if params.start_index is None else params.start_index
        )
        finish_index = end_index if params.finish_index is None else params.finish_index
        if start_index > end_index:
            raise configuration_error(
                path="execution.start_index",
                message=f"execution.start_index {start_index} is after series end {end_index}",
            )
        if finish_index > end_index:
            raise configuration_error(
                path="execution.finish_index",
                message=f"execution.finish_index {finish_index} is after series end {end_index}",
            )
        if start_index > finish_index:
            raise configuration_error(
                path="execution.start_index",
                message=(
                    "execution.start_index must be <= finish_index, got "
                    f"{start_index} > {finish_index}"
                ),
            )
        return start_index, finish_index

    def _apply_end_of_series_policy(
        self,
        *,
        record: TradingRecord,
        policy: EndOfSeriesPolicy,
        finish_index: int,
        finish_price: Num,
    ) -> None:
        """
        Close trailing position at the last visited bar under `FORCE_CLOSE`.

        Args:
            record: Record after the pass.
            policy: Configured end-of-series policy.
            finish_index: Last visited bar index.
            finish_price: Fill price at `finish_index`.
        Returns:
            None.
        Assumptions:
            A position opened on the last visited bar cannot be closed there and stays open.
        Raises:
            None.
        Side Effects:
            May close current position of `record`.
        """
        position = record.current_position
        if position is None or policy is EndOfSeriesPolicy.LEAVE_OPEN:
            return
        if finish_index <= position.entry_index:
            log.info(
                "position opened on last visited bar index=%s stays open",
                position.entry_index,
            )
            return
        if self._series.num.is_nan(finish_price):
            log.warning(
                "position left open: fill price at last visited bar index=%s is unstable",
                finish_index,
            )
            return
        record.exit(index=finish_index, price=finish_price)
        log.debug(
            "force-closed %s at index=%s price=%s",
            record.side.value,
            finish_index,
            finish_price,
        )
