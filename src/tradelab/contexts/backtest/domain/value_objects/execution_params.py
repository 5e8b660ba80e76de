from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from tradelab.platform.errors import configuration_error
from tradelab.shared_kernel.primitives import PositionSide

Amount = Union[int, float, Decimal]


class EndOfSeriesPolicy(str, Enum):
    """
    What the runner does with a position still open after the last visited bar.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.3)
    Related:
      - src/tradelab/contexts/backtest/application/services/strategy_runner.py
    """

    FORCE_CLOSE = "force_close"
    LEAVE_OPEN = "leave_open"

    @classmethod
    def parse(cls, raw: object) -> EndOfSeriesPolicy:
        """
        Parse policy literal (case-insensitive).

        Raises:
            ConfigurationError: If literal is unknown.
        """
        if isinstance(raw, EndOfSeriesPolicy):
            return raw
        normalized = str(raw).strip().lower()
        for policy in cls:
            if policy.value == normalized:
                return policy
        raise configuration_error(
            path="execution.end_of_series_policy",
            message=(
                "execution.end_of_series_policy must be one of "
                f"{[policy.value for policy in cls]}, got {raw!r}"
            ),
        )


@dataclass(frozen=True, slots=True)
class ExecutionParams:
    """
    Immutable run parameters of the strategy runner.

    Docs:
      - docs/architecture/backtest-engine.md (section 4.3)
    Related:
      - src/tradelab/contexts/backtest/application/services/strategy_runner.py
      - src/tradelab/contexts/backtest/adapters/outbound/config/backtest_runtime_config.py
      - tests/unit/contexts/backtest/domain/value_objects/test_execution_params.py
    """

    side: PositionSide = PositionSide.LONG
    amount: Amount = 1
    end_of_series_policy: EndOfSeriesPolicy = EndOfSeriesPolicy.FORCE_CLOSE
    start_index: int | None = None
    finish_index: int | None = None

    def __post_init__(self) -> None:
        """
        Validate side, amount, policy and optional sub-range bounds.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Range bounds are checked against the series later, by the runner.
        Raises:
            ConfigurationError: If one field is invalid.
        Side Effects:
            Normalizes `side` and `end_of_series_policy` literals into enums.
        """
        try:
            side = PositionSide.parse(self.side)
        except ValueError as error:
            raise configuration_error(
                path="execution.side",
                message=f"execution.side must be long or short, got {self.side!r}",
            ) from error
        object.__setattr__(self, "side", side)
        object.__setattr__(
            self,
            "end_of_series_policy",
            EndOfSeriesPolicy.parse(self.end_of_series_policy),
        )

        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float, Decimal)):
            raise configuration_error(
                path="execution.amount",
                message=f"execution.amount must be a number, got {self.amount!r}",
            )
        if self.amount != self.amount or self.amount <= 0:
            raise configuration_error(
                path="execution.amount",
                message=f"execution.amount must be > 0, got {self.amount!r}",
            )

        for name in ("start_index", "finish_index"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise configuration_error(
                    path=f"execution.{name}",
                    message=f"execution.{name} must be an int >= 0, got {value!r}",
                )
        if (
            self.start_index is not None
            and self.finish_index is not None
            and self.start_index > self.finish_index
        ):
            raise configuration_error(
                path="execution.start_index",
                message=(
                    "execution.start_index must be <= finish_index, got "
                    f"{self.start_index} > {self.finish_index}"
                ),
            )
