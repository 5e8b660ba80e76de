from __future__ import annotations

from tradelab.platform.numeric import Num

from .cached_indicator import CachedIndicator, validate_upstream, validate_window


class SMAIndicator(CachedIndicator):
    """
    Simple moving average of an upstream indicator over a fixed lookback window.

    `value(i)` is the arithmetic mean of `upstream` over `[i - window + 1, i]`, summed in
    ascending index order so that recomputation is bit-identical.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.1)
    Related:
      - src/tradelab/contexts/indicators/adapters/outbound/compute_numpy/ma.py
      - tests/unit/contexts/indicators/domain/test_moving_average.py
    """

    def __init__(self, upstream: CachedIndicator, window: int) -> None:
        """
        Build SMA bound to the upstream indicator series.

        Args:
            upstream: Source indicator (for example close price).
            window: Positive lookback window.
        Returns:
            None.
        Assumptions:
            Upstream indicator is not mutated after construction.
        Raises:
            ConfigurationError: If upstream is not an indicator or window is invalid.
        Side Effects:
            None.
        """
        validated_upstream = validate_upstream(owner="SMAIndicator", upstream=upstream)
        self._window = validate_window(owner="SMAIndicator", window=window)
        super().__init__(validated_upstream.series)
        self._upstream = validated_upstream

    @property
    def window(self) -> int:
        return self._window

    @property
    def upstream(self) -> CachedIndicator:
        return self._upstream

    @property
    def minimum_stable_index(self) -> int:
        return self._upstream.minimum_stable_index + self._window - 1

    def _calculate(self, index: int) -> Num:
        start = index - self._window + 1
        values = [self._upstream.value(position) for position in range(start, index + 1)]
        return self.num.mean(values)

    def __repr__(self) -> str:
        return f"SMAIndicator({self._upstream!r}, window={self._window})"


class EMAIndicator(CachedIndicator):
    """
    Exponential moving average with multiplier `2 / (window + 1)`.

    Seeded with the first stable upstream value and advanced iteratively, so long series do not
    hit the interpreter recursion limit. The first `window - 1` values after the seed are
    reported as unstable.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.1)
    Related:
      - src/tradelab/contexts/indicators/adapters/outbound/compute_numpy/ma.py
      - tests/unit/contexts/indicators/domain/test_moving_average.py
    """

    def __init__(self, upstream: CachedIndicator, window: int) -> None:
        validated_upstream = validate_upstream(owner="EMAIndicator", upstream=upstream)
        self._window = validate_window(owner="EMAIndicator", window=window)
        super().__init__(validated_upstream.series)
        self._upstream = validated_upstream
        self._multiplier = self.num.divide(self.num.of(2), self.num.of(window + 1))
        self._seed_index = validated_upstream.minimum_stable_index
        self._raw: dict[int, Num] = {}
        self._raw_next_index = self._seed_index

    @property
    def window(self) -> int:
        return self._window

    @property
    def minimum_stable_index(self) -> int:
        return self._seed_index + self._window - 1

    def _calculate(self, index: int) -> Num:
        num = self.num
        for position in range(self._raw_next_index, index + 1):
            current = self._upstream.value(position)
            if position == self._seed_index:
                self._raw[position] = current
                continue
            previous = self._raw[position - 1]
            delta = num.multiply(num.subtract(current, previous), self._multiplier)
            self._raw[position] = num.add(previous, delta)
        self._raw_next_index = max(self._raw_next_index, index + 1)
        return self._raw[index]

    def __repr__(self) -> str:
        return f"EMAIndicator({self._upstream!r}, window={self._window})"
