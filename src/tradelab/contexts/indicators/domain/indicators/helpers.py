from __future__ import annotations

from typing import Any

from tradelab.platform.errors import configuration_error
from tradelab.platform.numeric import Num
from tradelab.shared_kernel.primitives import BarSeries

from .cached_indicator import CachedIndicator


class _BarFieldIndicator(CachedIndicator):
    """Indicator reading one raw field of the bar at index; stable from index 0."""

    _field = "close"

    def _calculate(self, index: int) -> Num:
        return getattr(self.series.bar(index), self._field)


class ClosePriceIndicator(_BarFieldIndicator):
    _field = "close"


class OpenPriceIndicator(_BarFieldIndicator):
    _field = "open"


class HighPriceIndicator(_BarFieldIndicator):
    _field = "high"


class LowPriceIndicator(_BarFieldIndicator):
    _field = "low"


class VolumeIndicator(_BarFieldIndicator):
    _field = "volume"


class ConstantIndicator(CachedIndicator):
    """
    Indicator returning the same value at every index (fixed rule thresholds).

    Docs:
      - docs/architecture/backtest-engine.md (section 4.1)
    Related:
      - src/tradelab/contexts/strategy/domain/rules/crossed_indicator_rules.py
    """

    def __init__(self, series: BarSeries, constant: Any) -> None:
        """
        Build constant indicator converted with the series numeric policy.

        Args:
            series: Bound bar series.
            constant: Scalar threshold.
        Returns:
            None.
        Assumptions:
            None.
        Raises:
            ConfigurationError: If constant is not a finite number.
        Side Effects:
            None.
        """
        super().__init__(series)
        try:
            converted = series.num_of(constant)
        except ValueError as error:
            raise configuration_error(
                path="ConstantIndicator.constant",
                message=f"ConstantIndicator.constant must be numeric, got {constant!r}",
            ) from error
        if self.num.is_nan(converted):
            raise configuration_error(
                path="ConstantIndicator.constant",
                message="ConstantIndicator.constant must not be NaN",
            )
        self._constant = converted

    @property
    def constant(self) -> Num:
        return self._constant

    def _calculate(self, index: int) -> Num:
        return self._constant

    def __repr__(self) -> str:
        return f"ConstantIndicator({self._constant})"
