from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Union

import numpy as np

from tradelab.contexts.indicators.domain.indicators import CachedIndicator, ConstantIndicator
from tradelab.platform.errors import configuration_error
from tradelab.platform.numeric import Num

from .rule import Rule, ensure_single_series

if TYPE_CHECKING:
    from tradelab.contexts.backtest.domain.entities import TradingRecord

IndicatorOrNumber = Union[CachedIndicator, int, float, Decimal, np.floating]


class _CrossedIndicatorRule(Rule):
    """
    Shared binding/evaluation logic of the crossover rules.

    A crossing at `i` needs stable values of both operands at `i`. When an operand is still
    unstable at `i - 1`, the pair counts as "not yet crossed" there, so the first stable bar
    where the strict relation holds is reported as the crossing.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.2)
    Related:
      - src/tradelab/contexts/strategy/domain/rules/rule.py
      - tests/unit/contexts/strategy/domain/rules/test_crossed_indicator_rules.py
    """

    def __init__(self, first: CachedIndicator, second: IndicatorOrNumber) -> None:
        """
        Bind crossover operands.

        Args:
            first: Indicator that crosses.
            second: Indicator or number that is crossed; numbers become `ConstantIndicator`.
        Returns:
            None.
        Assumptions:
            Numbers are converted with the numeric policy of `first.series`.
        Raises:
            ConfigurationError: If `first` is not an indicator or operands use different series.
        Side Effects:
            None.
        """
        owner = type(self).__name__
        if not isinstance(first, CachedIndicator):
            raise configuration_error(
                path=f"{owner}.first",
                message=f"{owner}.first must be an indicator, got {type(first).__name__}",
            )
        if not isinstance(second, CachedIndicator):
            second = ConstantIndicator(first.series, second)
        ensure_single_series(owner=owner, indicators=(first, second))
        self._first = first
        self._second = second

    @property
    def first(self) -> CachedIndicator:
        return self._first

    @property
    def second(self) -> CachedIndicator:
        return self._second

    def indicators(self) -> tuple[CachedIndicator, ...]:
        return (self._first, self._second)

    def is_satisfied(self, index: int, trading_record: TradingRecord | None = None) -> bool:
        num = self._first.num
        first_now = self._first.value(index)
        second_now = self._second.value(index)
        if index == 0:
            return False
        if num.is_nan(first_now) or num.is_nan(second_now):
            return False
        if not self._holds_now(first_now, second_now):
            return False

        first_before = self._first.value(index - 1)
        second_before = self._second.value(index - 1)
        if num.is_nan(first_before) or num.is_nan(second_before):
            return True
        return self._held_before(first_before, second_before)

    @abstractmethod
    def _holds_now(self, first: Num, second: Num) -> bool:
        """Strict relation required at the evaluated index."""

    @abstractmethod
    def _held_before(self, first: Num, second: Num) -> bool:
        """Relation required at the previous index."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._first!r}, {self._second!r})"


class CrossedUpIndicatorRule(_CrossedIndicatorRule):
    """Satisfied when `first` moves from `<= second` on the previous bar to `> second`."""

    def _holds_now(self, first: Num, second: Num) -> bool:
        return first > second

    def _held_before(self, first: Num, second: Num) -> bool:
        return first <= second


class CrossedDownIndicatorRule(_CrossedIndicatorRule):
    """Satisfied when `first` moves from `>= second` on the previous bar to `< second`."""

    def _holds_now(self, first: Num, second: Num) -> bool:
        return first < second

    def _held_before(self, first: Num, second: Num) -> bool:
        return first >= second
