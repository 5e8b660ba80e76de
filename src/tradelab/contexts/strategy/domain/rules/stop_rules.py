from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from tradelab.contexts.indicators.domain.indicators import CachedIndicator
from tradelab.platform.errors import configuration_error
from tradelab.platform.numeric import Num
from tradelab.shared_kernel.primitives import PositionSide

from .rule import Rule

if TYPE_CHECKING:
    from tradelab.contexts.backtest.domain.entities import TradingRecord


class _PercentageStopRule(Rule):
    """
    Position-aware exit rule comparing price against a percentage band around entry price.

    The rule is never satisfied without a record or without an open position in it.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.2)
    Related:
      - src/tradelab/contexts/backtest/domain/entities/trading_record.py
      - tests/unit/contexts/strategy/domain/rules/test_stop_rules.py
    """

    def __init__(self, price: CachedIndicator, percentage: Any) -> None:
        """
        Bind price indicator and validate percentage.

        Args:
            price: Price indicator, usually close price.
            percentage: Non-negative percentage in human units (`3` means 3%).
        Returns:
            None.
        Assumptions:
            Percentage is converted with the numeric policy of `price.series`.
        Raises:
            ConfigurationError: If price is not an indicator or percentage is invalid.
        Side Effects:
            None.
        """
        owner = type(self).__name__
        if not isinstance(price, CachedIndicator):
            raise configuration_error(
                path=f"{owner}.price",
                message=f"{owner}.price must be an indicator, got {type(price).__name__}",
            )
        num = price.num
        try:
            converted = num.of(percentage)
        except ValueError as error:
            raise configuration_error(
                path=f"{owner}.percentage",
                message=f"{owner}.percentage must be numeric, got {percentage!r}",
            ) from error
        if num.is_nan(converted) or converted < num.zero():
            raise configuration_error(
                path=f"{owner}.percentage",
                message=f"{owner}.percentage must be >= 0, got {percentage!r}",
            )

        self._price = price
        self._percentage = converted
        hundred = num.hundred()
        # (100 - pct) / 100 and (100 + pct) / 100
        self._below_ratio = num.divide(num.subtract(hundred, converted), hundred)
        self._above_ratio = num.divide(num.add(hundred, converted), hundred)

    @property
    def price(self) -> CachedIndicator:
        return self._price

    @property
    def percentage(self) -> Num:
        return self._percentage

    def indicators(self) -> tuple[CachedIndicator, ...]:
        return (self._price,)

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        current_price = self._price.value(index)
        if trading_record is None:
            return False
        position = trading_record.current_position
        if position is None:
            return False

        num = self._price.num
        if num.is_nan(current_price):
            return False
        return self._is_hit(
            side=position.side,
            entry_price=position.entry_price,
            current_price=current_price,
        )

    @abstractmethod
    def _is_hit(self, *, side: PositionSide, entry_price: Num, current_price: Num) -> bool:
        """Compare current price with the band of an open position."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._price!r}, {self._percentage})"


class StopLossRule(_PercentageStopRule):
    """
    Satisfied on an adverse move of at least `percentage` from the entry price.

    Long: `price <= entry * (100 - pct) / 100`. Short: `price >= entry * (100 + pct) / 100`.
    """

    def _is_hit(self, *, side: PositionSide, entry_price: Num, current_price: Num) -> bool:
        num = self._price.num
        if side is PositionSide.SHORT:
            return current_price >= num.multiply(entry_price, self._above_ratio)
        return current_price <= num.multiply(entry_price, self._below_ratio)


class StopGainRule(_PercentageStopRule):
    """
    Satisfied on a favorable move of at least `percentage` from the entry price.

    Long: `price >= entry * (100 + pct) / 100`. Short: `price <= entry * (100 - pct) / 100`.
    """

    def _is_hit(self, *, side: PositionSide, entry_price: Num, current_price: Num) -> bool:
        num = self._price.num
        if side is PositionSide.SHORT:
            return current_price <= num.multiply(entry_price, self._below_ratio)
        return current_price >= num.multiply(entry_price, self._above_ratio)
