from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from tradelab.platform.errors import configuration_error

Scalar = Union[int, float, Decimal]

_PATH_PREFIX = "strategy.sma_crossover"


@dataclass(frozen=True, slots=True)
class SmaCrossoverParams:
    """
    Immutable parameters of the SMA crossover strategy with percentage stops.

    Defaults reproduce the reference setup: SMA(5) vs SMA(30) on close price, extra
    entry when close crosses down through `800`, exits on crossover down, 3% stop-loss or
    2% stop-gain.

    Docs:
      - docs/architecture/backtest-engine.md (section 7.2)
    Related:
      - src/tradelab/contexts/strategy/application/services/sma_crossover.py
      - src/tradelab/contexts/backtest/adapters/outbound/config/backtest_runtime_config.py
    """

    short_window: int = 5
    long_window: int = 30
    entry_price_threshold: Scalar | None = 800
    stop_loss_pct: Scalar | None = 3
    stop_gain_pct: Scalar | None = 2

    def __post_init__(self) -> None:
        """
        Validate window ordering and percentage bounds.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            `None` disables the optional threshold entry or the corresponding stop exit.
        Raises:
            ConfigurationError: If windows are not positive ints with `short < long`, or
                threshold/percentages are negative or non-numeric.
        Side Effects:
            None.
        """
        for name in ("short_window", "long_window"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise configuration_error(
                    path=f"{_PATH_PREFIX}.{name}",
                    message=f"{name} must be a positive int, got {value!r}",
                )
        if self.short_window >= self.long_window:
            raise configuration_error(
                path=f"{_PATH_PREFIX}.short_window",
                message=(
                    "short_window must be < long_window, got "
                    f"{self.short_window} >= {self.long_window}"
                ),
            )

        _validate_optional_scalar(name="entry_price_threshold", value=self.entry_price_threshold)
        _validate_optional_scalar(name="stop_loss_pct", value=self.stop_loss_pct)
        _validate_optional_scalar(name="stop_gain_pct", value=self.stop_gain_pct)


def _validate_optional_scalar(*, name: str, value: object) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise configuration_error(
            path=f"{_PATH_PREFIX}.{name}",
            message=f"{name} must be a number, got {value!r}",
        )
    if value != value or value < 0:
        raise configuration_error(
            path=f"{_PATH_PREFIX}.{name}",
            message=f"{name} must be >= 0, got {value!r}",
        )
