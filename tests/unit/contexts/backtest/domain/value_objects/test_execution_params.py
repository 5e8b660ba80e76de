from __future__ import annotations

from decimal import Decimal

import pytest

from tradelab.contexts.backtest.domain.value_objects import EndOfSeriesPolicy, ExecutionParams
from tradelab.platform.errors import ConfigurationError
from tradelab.shared_kernel.primitives import PositionSide


def test_execution_params_defaults() -> None:
    """
    Verify default run parameters: long side, amount 1, force close, full series.
    """
    params = ExecutionParams()

    assert params.side is PositionSide.LONG
    assert params.amount == 1
    assert params.end_of_series_policy is EndOfSeriesPolicy.FORCE_CLOSE
    assert params.start_index is None
    assert params.finish_index is None


def test_execution_params_normalize_literals() -> None:
    """
    Verify side/policy literals are parsed case-insensitively.
    """
    params = ExecutionParams(
        side=" SHORT ",  # type: ignore[arg-type]
        amount=Decimal("0.5"),
        end_of_series_policy="Leave_Open",  # type: ignore[arg-type]
        start_index=3,
        finish_index=3,
    )

    assert params.side is PositionSide.SHORT
    assert params.end_of_series_policy is EndOfSeriesPolicy.LEAVE_OPEN


@pytest.mark.parametrize(
    ("kwargs", "path"),
    (
        ({"side": "sideways"}, "execution.side"),
        ({"amount": 0}, "execution.amount"),
        ({"amount": -2.5}, "execution.amount"),
        ({"amount": True}, "execution.amount"),
        ({"amount": "1"}, "execution.amount"),
        ({"end_of_series_policy": "close_later"}, "execution.end_of_series_policy"),
        ({"start_index": -1}, "execution.start_index"),
        ({"finish_index": 1.0}, "execution.finish_index"),
        ({"start_index": 5, "finish_index": 4}, "execution.start_index"),
    ),
)
def test_execution_params_reject_invalid_values(kwargs: dict[str, object], path: str) -> None:
    """
    Verify invalid execution params raise ConfigurationError with parameter path.

    Args:
        kwargs: Overridden fields.
        path: Expected error path.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If error path differs.
    Side Effects:
        None.
    """
    with pytest.raises(ConfigurationError) as error_info:
        ExecutionParams(**kwargs)  # type: ignore[arg-type]

    assert error_info.value.errors[0]["path"] == path
