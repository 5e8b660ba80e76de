"""
Numeric representation policies shared by bars, indicators, rules and criteria.

One policy instance is chosen per bar series and every arithmetic step of a run goes through
it, so a simulation never mixes `Decimal` and binary floating point values.

Docs: docs/architecture/backtest-engine.md (section 4.0, numeric policy)
Related: tradelab.shared_kernel.primitives.bar_series,
  tradelab.contexts.backtest.adapters.outbound.config.backtest_runtime_config
"""

from __future__ import annotations

import decimal
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Sequence, Union

import numpy as np

from tradelab.platform.errors import configuration_error

Num = Union[Decimal, np.floating]

_ALLOWED_MODES = ("decimal", "float")
_ALLOWED_FLOAT_BITS = {32: np.float32, 64: np.float64}
_ALLOWED_ROUNDINGS = (
    decimal.ROUND_CEILING,
    decimal.ROUND_DOWN,
    decimal.ROUND_FLOOR,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_UP,
    decimal.ROUND_05UP,
)
_DECIMAL_SCALE_DEFAULT = 8
_DECIMAL_ROUNDING_DEFAULT = decimal.ROUND_HALF_UP
_FLOAT_BITS_DEFAULT = 64


class NumericPolicy(ABC):
    """
    Abstract numeric representation used consistently across one simulation run.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.0)
    Related:
      - src/tradelab/shared_kernel/primitives/bar_series.py
      - src/tradelab/contexts/indicators/domain/indicators/cached_indicator.py
      - src/tradelab/contexts/backtest/application/services/criteria/analysis_criterion.py
    """

    @property
    @abstractmethod
    def mode(self) -> str:
        """Return policy mode literal (`decimal` or `float`)."""

    @abstractmethod
    def of(self, value: Any) -> Num:
        """
        Convert scalar into this policy representation.

        Args:
            value: int, float, str, Decimal or numpy scalar.
        Returns:
            Num: Converted value.
        Assumptions:
            Values of another representation are converted, never mixed.
        Raises:
            ValueError: If value cannot be represented.
        Side Effects:
            None.
        """

    @abstractmethod
    def nan(self) -> Num:
        """Return the "unstable" marker of this representation."""

    @abstractmethod
    def infinity(self, *, negative: bool = False) -> Num:
        """Return signed infinity used as degenerate-criterion sentinel."""

    @abstractmethod
    def is_nan(self, value: Num) -> bool:
        """Return whether value is the NaN marker."""

    @abstractmethod
    def add(self, left: Num, right: Num) -> Num:
        """Return `left + right`."""

    @abstractmethod
    def subtract(self, left: Num, right: Num) -> Num:
        """Return `left - right`."""

    @abstractmethod
    def multiply(self, left: Num, right: Num) -> Num:
        """Return `left * right`."""

    @abstractmethod
    def divide(self, numerator: Num, denominator: Num) -> Num:
        """
        Return `numerator / denominator`.

        Raises:
            ZeroDivisionError: If denominator is zero.
        """

    def zero(self) -> Num:
        return self.of(0)

    def one(self) -> Num:
        return self.of(1)

    def hundred(self) -> Num:
        return self.of(100)

    def absolute(self, value: Num) -> Num:
        if value < self.zero():
            return self.subtract(self.zero(), value)
        return value

    def total(self, values: Iterable[Num]) -> Num:
        """
        Sum values in iteration order.

        Args:
            values: Values of this representation.
        Returns:
            Num: Sum, or zero for an empty iterable.
        Assumptions:
            Fixed left-to-right order keeps repeated sums bit-identical.
        Raises:
            None.
        Side Effects:
            None.
        """
        result = self.zero()
        for value in values:
            result = self.add(result, value)
        return result

    def mean(self, values: Sequence[Num]) -> Num:
        """
        Return arithmetic mean of non-empty sequence.

        Raises:
            ValueError: If values sequence is empty.
        """
        if len(values) == 0:
            raise ValueError("mean requires at least one value")
        return self.divide(self.total(values), self.of(len(values)))


@dataclass(frozen=True, slots=True)
class DecimalNumericPolicy(NumericPolicy):
    """
    Fixed-point decimal representation with explicit scale and rounding mode.

    Every produced value is quantized to `scale` fractional digits with `rounding`.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.0)
    Related:
      - src/tradelab/platform/numeric/numeric_policy.py
      - tests/unit/platform/numeric/test_numeric_policy.py
    """

    scale: int = _DECIMAL_SCALE_DEFAULT
    rounding: str = _DECIMAL_ROUNDING_DEFAULT
    _context: decimal.Context = field(init=False, repr=False, compare=False)
    _quantum: Decimal = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """
        Validate scale/rounding and prepare arithmetic context.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Context precision leaves 20 integer digits on top of configured scale.
        Raises:
            ConfigurationError: If scale is negative or rounding literal is unknown.
        Side Effects:
            Stores private decimal context and quantum.
        """
        if isinstance(self.scale, bool) or not isinstance(self.scale, int) or self.scale < 0:
            raise configuration_error(
                path="numeric.scale",
                message=f"numeric.scale must be an int >= 0, got {self.scale!r}",
            )
        normalized_rounding = str(self.rounding).strip().upper()
        if normalized_rounding not in _ALLOWED_ROUNDINGS:
            raise configuration_error(
                path="numeric.rounding",
                message=(
                    f"numeric.rounding must be one of {sorted(_ALLOWED_ROUNDINGS)}, "
                    f"got {self.rounding!r}"
                ),
            )
        object.__setattr__(self, "rounding", normalized_rounding)
        object.__setattr__(
            self,
            "_context",
            decimal.Context(prec=self.scale + 20, rounding=normalized_rounding),
        )
        object.__setattr__(self, "_quantum", Decimal(1).scaleb(-self.scale))

    @property
    def mode(self) -> str:
        return "decimal"

    def of(self, value: Any) -> Decimal:
        """
        Convert scalar into a quantized Decimal.

        Raises:
            ValueError: If value is not numeric, not parseable or has more integer digits
                than the policy precision holds.
        """
        try:
            return self._convert(value)
        except decimal.InvalidOperation as error:
            raise ValueError(
                f"cannot convert {value!r} to Decimal with scale {self.scale}"
            ) from error

    def _convert(self, value: Any) -> Decimal:
        if isinstance(value, Decimal):
            return self._quantize(value)
        if isinstance(value, bool):
            raise ValueError("bool is not a numeric value")
        if isinstance(value, (int, str)):
            return self._quantize(Decimal(value))
        if isinstance(value, (float, np.floating, np.integer)):
            as_float = float(value)
            if math.isnan(as_float):
                return self.nan()
            if math.isinf(as_float):
                return self.infinity(negative=as_float < 0)
            return self._quantize(Decimal(repr(as_float)))
        raise ValueError(f"unsupported numeric value type: {type(value).__name__}")

    def nan(self) -> Decimal:
        return Decimal("NaN")

    def infinity(self, *, negative: bool = False) -> Decimal:
        return Decimal("-Infinity") if negative else Decimal("Infinity")

    def is_nan(self, value: Num) -> bool:
        return isinstance(value, Decimal) and value.is_nan()

    def add(self, left: Num, right: Num) -> Decimal:
        return self._quantize(self._context.add(left, right))

    def subtract(self, left: Num, right: Num) -> Decimal:
        return self._quantize(self._context.subtract(left, right))

    def multiply(self, left: Num, right: Num) -> Decimal:
        return self._quantize(self._context.multiply(left, right))

    def divide(self, numerator: Num, denominator: Num) -> Decimal:
        if denominator == 0:
            raise ZeroDivisionError("division by zero")
        return self._quantize(self._context.divide(numerator, denominator))

    def _quantize(self, value: Decimal) -> Decimal:
        if not value.is_finite():
            return value
        return value.quantize(self._quantum, context=self._context)


@dataclass(frozen=True, slots=True)
class FloatNumericPolicy(NumericPolicy):
    """
    IEEE-754 binary floating point representation backed by numpy scalar dtypes.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.0)
    Related:
      - src/tradelab/platform/numeric/numeric_policy.py
      - tests/unit/platform/numeric/test_numeric_policy.py
    """

    bits: int = _FLOAT_BITS_DEFAULT

    def __post_init__(self) -> None:
        """
        Validate float bit-width.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Only numpy `float32` and `float64` are supported.
        Raises:
            ConfigurationError: If bit-width is not 32 or 64.
        Side Effects:
            None.
        """
        if isinstance(self.bits, bool) or self.bits not in _ALLOWED_FLOAT_BITS:
            raise configuration_error(
                path="numeric.bits",
                message=(
                    f"numeric.bits must be one of {sorted(_ALLOWED_FLOAT_BITS)}, "
                    f"got {self.bits!r}"
                ),
            )

    @property
    def mode(self) -> str:
        return "float"

    @property
    def dtype(self) -> type[np.floating]:
        return _ALLOWED_FLOAT_BITS[self.bits]

    def of(self, value: Any) -> np.floating:
        if isinstance(value, bool):
            raise ValueError("bool is not a numeric value")
        if isinstance(value, (Decimal, str)):
            try:
                return self.dtype(float(value))
            except ValueError as error:
                raise ValueError(f"cannot convert {value!r} to {self.dtype.__name__}") from error
        if isinstance(value, (int, float, np.floating, np.integer)):
            return self.dtype(value)
        raise ValueError(f"unsupported numeric value type: {type(value).__name__}")

    def nan(self) -> np.floating:
        return self.dtype(np.nan)

    def infinity(self, *, negative: bool = False) -> np.floating:
        return self.dtype(-np.inf) if negative else self.dtype(np.inf)

    def is_nan(self, value: Num) -> bool:
        return isinstance(value, (float, np.floating)) and bool(np.isnan(value))

    def add(self, left: Num, right: Num) -> np.floating:
        return self.dtype(self.dtype(left) + self.dtype(right))

    def subtract(self, left: Num, right: Num) -> np.floating:
        return self.dtype(self.dtype(left) - self.dtype(right))

    def multiply(self, left: Num, right: Num) -> np.floating:
        return self.dtype(self.dtype(left) * self.dtype(right))

    def divide(self, numerator: Num, denominator: Num) -> np.floating:
        if denominator == 0:
            raise ZeroDivisionError("division by zero")
        return self.dtype(self.dtype(numerator) / self.dtype(denominator))


def build_numeric_policy(
    *,
    mode: str,
    scale: int = _DECIMAL_SCALE_DEFAULT,
    rounding: str = _DECIMAL_ROUNDING_DEFAULT,
    bits: int = _FLOAT_BITS_DEFAULT,
) -> NumericPolicy:
    """
    Build numeric policy from configuration literals.

    Args:
        mode: `decimal` or `float`.
        scale: Decimal fractional digits (decimal mode only).
        rounding: Decimal rounding mode name (decimal mode only).
        bits: Float bit-width, 32 or 64 (float mode only).
    Returns:
        NumericPolicy: Validated policy instance.
    Assumptions:
        Parameters irrelevant for selected mode are ignored.
    Raises:
        ConfigurationError: If mode or mode parameters are invalid.
    Side Effects:
        None.
    """
    normalized_mode = str(mode).strip().lower()
    if normalized_mode == "decimal":
        return DecimalNumericPolicy(scale=scale, rounding=rounding)
    if normalized_mode == "float":
        return FloatNumericPolicy(bits=bits)
    raise configuration_error(
        path="numeric.mode",
        message=f"numeric.mode must be one of {_ALLOWED_MODES}, got {mode!r}",
    )


__all__ = [
    "DecimalNumericPolicy",
    "FloatNumericPolicy",
    "Num",
    "NumericPolicy",
    "build_numeric_policy",
]
