from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

from tradelab.contexts.indicators.domain.indicators import CachedIndicator
from tradelab.platform.errors import configuration_error
from tradelab.shared_kernel.primitives import BarSeries

if TYPE_CHECKING:
    from tradelab.contexts.backtest.domain.entities import TradingRecord


class Rule(ABC):
    """
    Boolean trading condition evaluated bar by bar.

    Rules form a closed composition tree: leaf rules read indicators, `OrRule`/`AndRule`
    combine two rules. Evaluation at index `i` reads only indicator values at indices `<= i`.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.2, rule engine)
    Related:
      - src/tradelab/contexts/strategy/domain/rules/crossed_indicator_rules.py
      - src/tradelab/contexts/strategy/domain/rules/stop_rules.py
      - src/tradelab/contexts/strategy/domain/entities/strategy.py
    """

    @abstractmethod
    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        """
        Evaluate rule at bar index.

        Args:
            index: Bar index in the bound series.
            trading_record: Record of the ongoing run; position-aware rules need it.
        Returns:
            bool: True when the condition holds at `index`.
        Assumptions:
            Unstable indicator values make the rule unsatisfied, they never raise.
        Raises:
            IndexError: If index is outside series bounds.
        Side Effects:
            Populates indicator caches.
        """

    @abstractmethod
    def indicators(self) -> tuple[CachedIndicator, ...]:
        """Return every indicator read by this rule (composites include both operands)."""

    @property
    def series(self) -> BarSeries | None:
        """Series the rule is bound to, `None` for a rule reading no indicators."""
        indicators = self.indicators()
        if not indicators:
            return None
        return indicators[0].series

    def or_(self, other: Rule) -> OrRule:
        return OrRule(self, other)

    def and_(self, other: Rule) -> AndRule:
        return AndRule(self, other)


class OrRule(Rule):
    """Satisfied when either operand is; the right operand is skipped when the left holds."""

    def __init__(self, left: Rule, right: Rule) -> None:
        self._left, self._right = _validate_operands(owner="OrRule", left=left, right=right)

    @property
    def left(self) -> Rule:
        return self._left

    @property
    def right(self) -> Rule:
        return self._right

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        return self._left.is_satisfied(index, trading_record) or self._right.is_satisfied(
            index, trading_record
        )

    def indicators(self) -> tuple[CachedIndicator, ...]:
        return self._left.indicators() + self._right.indicators()

    def __repr__(self) -> str:
        return f"OrRule({self._left!r}, {self._right!r})"


class AndRule(Rule):
    """Satisfied when both operands are; the right operand is skipped when the left fails."""

    def __init__(self, left: Rule, right: Rule) -> None:
        self._left, self._right = _validate_operands(owner="AndRule", left=left, right=right)

    @property
    def left(self) -> Rule:
        return self._left

    @property
    def right(self) -> Rule:
        return self._right

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        return self._left.is_satisfied(index, trading_record) and self._right.is_satisfied(
            index, trading_record
        )

    def indicators(self) -> tuple[CachedIndicator, ...]:
        return self._left.indicators() + self._right.indicators()

    def __repr__(self) -> str:
        return f"AndRule({self._left!r}, {self._right!r})"


def ensure_single_series(
    *,
    owner: str,
    indicators: Iterable[CachedIndicator],
) -> BarSeries | None:
    """
    Ensure that all indicators are bound to one series instance.

    Args:
        owner: Rule or strategy name used in error path.
        indicators: Indicators read by the owner.
    Returns:
        BarSeries | None: Common series, `None` when there are no indicators.
    Assumptions:
        Series are compared by identity, two equal-looking series are still different.
    Raises:
        ConfigurationError: If indicators are bound to different series.
    Side Effects:
        None.
    """
    common: BarSeries | None = None
    for indicator in indicators:
        if common is None:
            common = indicator.series
            continue
        if indicator.series is not common:
            raise configuration_error(
                path=f"{owner}.series",
                message=(
                    f"{owner} mixes indicators bound to different series: "
                    f"{common.name!r} and {indicator.series.name!r}"
                ),
            )
    return common


def _validate_operands(*, owner: str, left: object, right: object) -> tuple[Rule, Rule]:
    """
    Validate composite rule operands.

    Raises:
        ConfigurationError: If an operand is not a rule or operands use different series.
    """
    if not isinstance(left, Rule):
        raise configuration_error(
            path=f"{owner}.left",
            message=f"{owner}.left must be a Rule, got {type(left).__name__}",
        )
    if not isinstance(right, Rule):
        raise configuration_error(
            path=f"{owner}.right",
            message=f"{owner}.right must be a Rule, got {type(right).__name__}",
        )
    ensure_single_series(owner=owner, indicators=left.indicators() + right.indicators())
    return left, right
