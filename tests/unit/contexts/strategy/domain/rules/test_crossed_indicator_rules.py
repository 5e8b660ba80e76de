from __future__ import annotations

from typing import Sequence

import pytest

from tradelab.contexts.indicators.domain.indicators import ClosePriceIndicator, SMAIndicator
from tradelab.contexts.strategy.domain.rules import (
    CrossedDownIndicatorRule,
    CrossedUpIndicatorRule,
)
from tradelab.platform.errors import ConfigurationError
from tradelab.platform.numeric import FloatNumericPolicy, NumericPolicy
from tradelab.shared_kernel.primitives import BarSeries


def _series_from_closes(
    closes: Sequence[object],
    *,
    num: NumericPolicy | None = None,
    name: str = "test",
) -> BarSeries:
    """
    Build flat-candle series from close values with timestamps `0..n-1`.
    """
    rows = [
        {"timestamp": index, "open": close, "high": close, "low": close, "close": close}
        for index, close in enumerate(closes)
    ]
    return BarSeries.from_rows(name=name, rows=rows, num=num)


def _satisfied_indices(rule, series: BarSeries) -> list[int]:
    return [index for index in range(len(series)) if rule.is_satisfied(index)]


def test_crossed_up_reports_first_bar_where_both_averages_are_stable() -> None:
    """
    Verify SMA(5)/SMA(30) crossover on rising closes fires once at index 29.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        SMA(30) is unstable before index 29, so index 28 counts as "not yet crossed".
    Raises:
        AssertionError: If crossing indices differ.
    Side Effects:
        None.
    """
    series = _series_from_closes(range(100, 140))
    close = ClosePriceIndicator(series)
    rule = CrossedUpIndicatorRule(SMAIndicator(close, 5), SMAIndicator(close, 30))

    assert _satisfied_indices(rule, series) == [29]


def test_crossed_down_through_constant_threshold() -> None:
    """
    Verify close crossing down through numeric threshold.
    """
    series = _series_from_closes([900, 850, 790, 780, 810, 799])
    rule = CrossedDownIndicatorRule(ClosePriceIndicator(series), 800)

    assert _satisfied_indices(rule, series) == [2, 5]


def test_touching_threshold_is_not_a_crossing() -> None:
    """
    Verify equality on current bar is not a crossing, equality on previous bar is a valid start.
    """
    series = _series_from_closes([5, 10, 10, 11, 10, 9])
    close = ClosePriceIndicator(series)

    assert _satisfied_indices(CrossedUpIndicatorRule(close, 10), series) == [3]
    assert _satisfied_indices(CrossedDownIndicatorRule(close, 10), series) == [5]


def test_crossed_up_and_down_are_mutually_exclusive() -> None:
    """
    Verify one pair of operands never crosses both ways on the same bar.
    """
    series = _series_from_closes([1, 3, 1, 3, 2, 2, 4, 0, 5, 5, 1])
    close = ClosePriceIndicator(series)
    sma = SMAIndicator(close, 2)
    up = CrossedUpIndicatorRule(close, sma)
    down = CrossedDownIndicatorRule(close, sma)

    for index in range(len(series)):
        assert not (up.is_satisfied(index) and down.is_satisfied(index))
    assert _satisfied_indices(up, series)
    assert _satisfied_indices(down, series)


def test_crossover_is_never_satisfied_at_index_zero() -> None:
    """
    Verify index 0 has no previous bar to compare with.
    """
    series = _series_from_closes([900])
    rule = CrossedDownIndicatorRule(ClosePriceIndicator(series), 1000)

    assert rule.is_satisfied(0) is False


def test_crossover_out_of_range_index_raises() -> None:
    """
    Verify out-of-range evaluation raises instead of returning False.
    """
    series = _series_from_closes([1, 2])
    rule = CrossedUpIndicatorRule(ClosePriceIndicator(series), 1)

    with pytest.raises(IndexError):
        rule.is_satisfied(2)
    with pytest.raises(IndexError):
        rule.is_satisfied(-1)


def test_crossover_threshold_uses_series_numeric_policy() -> None:
    """
    Verify numeric second operand is converted with the float policy of the series.
    """
    series = _series_from_closes([1.0, 2.0, 3.0], num=FloatNumericPolicy(bits=32))
    rule = CrossedUpIndicatorRule(ClosePriceIndicator(series), 1.5)

    assert rule.series is series
    assert _satisfied_indices(rule, series) == [1]


def test_crossover_rejects_operands_from_different_series() -> None:
    """
    Verify mixing two series in one rule is a configuration error.
    """
    left = _series_from_closes([1, 2, 3], name="left")
    right = _series_from_closes([1, 2, 3], name="right")

    with pytest.raises(ConfigurationError, match="different series") as error_info:
        CrossedUpIndicatorRule(ClosePriceIndicator(left), ClosePriceIndicator(right))

    assert error_info.value.errors[0]["path"] == "CrossedUpIndicatorRule.series"


def test_crossover_rejects_non_indicator_first_operand() -> None:
    """
    Verify first operand must be an indicator.
    """
    series = _series_from_closes([1, 2, 3])

    with pytest.raises(ConfigurationError):
        CrossedDownIndicatorRule(800, ClosePriceIndicator(series))  # type: ignore[arg-type]
