from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tradelab.contexts.indicators.domain.indicators import CachedIndicator
from tradelab.contexts.strategy.domain.rules import Rule, ensure_single_series
from tradelab.platform.errors import configuration_error
from tradelab.shared_kernel.primitives import BarSeries

if TYPE_CHECKING:
    from tradelab.contexts.backtest.domain.entities import TradingRecord


@dataclass(frozen=True, slots=True, eq=False)
class Strategy:
    """
    Strategy — named pair of entry/exit rules with an optional unstable-bars prefix.

    No entry or exit is signalled at indices `< unstable_bars`.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.3)
    Related:
      - src/tradelab/contexts/strategy/domain/rules/rule.py
      - src/tradelab/contexts/strategy/application/services/sma_crossover.py
      - src/tradelab/contexts/backtest/application/services/strategy_runner.py
    """

    name: str
    entry_rule: Rule
    exit_rule: Rule
    unstable_bars: int = 0

    def __post_init__(self) -> None:
        """
        Validate strategy name, rules and unstable prefix.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Entry and exit rules read indicators of one series.
        Raises:
            ConfigurationError: If a field is invalid or rules mix series.
        Side Effects:
            Normalizes `name` to stripped representation.
        """
        normalized_name = str(self.name).strip()
        if not normalized_name:
            raise configuration_error(
                path="Strategy.name",
                message="Strategy.name must be non-empty",
            )
        object.__setattr__(self, "name", normalized_name)

        for field_name in ("entry_rule", "exit_rule"):
            rule = getattr(self, field_name)
            if not isinstance(rule, Rule):
                raise configuration_error(
                    path=f"Strategy.{field_name}",
                    message=f"Strategy.{field_name} must be a Rule, got {type(rule).__name__}",
                )

        if (
            isinstance(self.unstable_bars, bool)
            or not isinstance(self.unstable_bars, int)
            or self.unstable_bars < 0
        ):
            raise configuration_error(
                path="Strategy.unstable_bars",
                message=f"Strategy.unstable_bars must be an int >= 0, got {self.unstable_bars!r}",
            )
        ensure_single_series(owner="Strategy", indicators=self.indicators())

    @property
    def series(self) -> BarSeries | None:
        indicators = self.indicators()
        if not indicators:
            return None
        return indicators[0].series

    def indicators(self) -> tuple[CachedIndicator, ...]:
        return self.entry_rule.indicators() + self.exit_rule.indicators()

    def is_unstable_at(self, index: int) -> bool:
        return index < self.unstable_bars

    def should_enter(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        if self.is_unstable_at(index):
            return False
        return self.entry_rule.is_satisfied(index, trading_record)

    def should_exit(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        if self.is_unstable_at(index):
            return False
        return self.exit_rule.is_satisfied(index, trading_record)
