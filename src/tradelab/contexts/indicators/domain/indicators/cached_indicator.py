from __future__ import annotations

from abc import ABC, abstractmethod

from tradelab.platform.errors import configuration_error
from tradelab.platform.numeric import Num, NumericPolicy
from tradelab.shared_kernel.primitives import BarSeries


class CachedIndicator(ABC):
    """
    Base indicator: pure `index -> Num` mapping bound to one bar series with memoization.

    A computed value never changes for the lifetime of the instance. Indices before
    `minimum_stable_index` return the policy NaN ("unstable") marker instead of a value.
    The cache is private to the instance and is not guarded for concurrent writers.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.1, indicator engine)
    Related:
      - src/tradelab/contexts/indicators/domain/indicators/moving_average.py
      - src/tradelab/contexts/indicators/domain/indicators/helpers.py
      - src/tradelab/contexts/strategy/domain/rules/crossed_indicator_rules.py
    """

    def __init__(self, series: BarSeries) -> None:
        """
        Bind indicator to its bar series.

        Args:
            series: Source bar series.
        Returns:
            None.
        Assumptions:
            Series is immutable, so cached values stay valid.
        Raises:
            ConfigurationError: If `series` is not a `BarSeries`.
        Side Effects:
            Allocates empty value cache.
        """
        if not isinstance(series, BarSeries):
            raise configuration_error(
                path=f"{type(self).__name__}.series",
                message=f"{type(self).__name__} requires a BarSeries",
            )
        self._series = series
        self._cache: dict[int, Num] = {}

    @property
    def series(self) -> BarSeries:
        return self._series

    @property
    def num(self) -> NumericPolicy:
        return self._series.num

    @property
    def minimum_stable_index(self) -> int:
        """First index whose value is fully defined."""
        return 0

    def is_stable(self, index: int) -> bool:
        return index >= self.minimum_stable_index

    def value(self, index: int) -> Num:
        """
        Return memoized indicator value at index.

        Args:
            index: Bar index in `[0, bar_count)`.
        Returns:
            Num: Indicator value, or policy NaN when index is in the unstable prefix.
        Assumptions:
            `_calculate` reads only indices `<= index`.
        Raises:
            IndexError: If index is outside series bounds.
        Side Effects:
            Stores computed value in the private cache.
        """
        if index < 0 or index >= len(self._series):
            raise IndexError(
                f"{type(self).__name__} index {index} outside [0, {len(self._series)})"
            )
        cached = self._cache.get(index)
        if cached is not None:
            return cached

        if index < self.minimum_stable_index:
            computed = self.num.nan()
        else:
            computed = self._calculate(index)
        self._cache[index] = computed
        return computed

    @abstractmethod
    def _calculate(self, index: int) -> Num:
        """Compute value at a stable index (called at most once per index)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(series={self._series.name!r})"


def validate_window(*, owner: str, window: object) -> int:
    """
    Validate indicator lookback window.

    Args:
        owner: Indicator class name used in error path.
        window: Candidate window value.
    Returns:
        int: Validated positive window.
    Assumptions:
        Bool values are rejected despite inheriting from `int`.
    Raises:
        ConfigurationError: If window is not a positive int.
    Side Effects:
        None.
    """
    if isinstance(window, bool) or not isinstance(window, int) or window <= 0:
        raise configuration_error(
            path=f"{owner}.window",
            message=f"{owner}.window must be a positive int, got {window!r}",
        )
    return window


def validate_upstream(*, owner: str, upstream: object) -> CachedIndicator:
    """
    Validate upstream indicator handle of a derived indicator.

    Raises:
        ConfigurationError: If upstream is not a `CachedIndicator`.
    """
    if not isinstance(upstream, CachedIndicator):
        raise configuration_error(
            path=f"{owner}.upstream",
            message=f"{owner} requires an indicator upstream, got {type(upstream).__name__}",
        )
    return upstream
