from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from tradelab.contexts.backtest.domain.entities import Position
from tradelab.contexts.backtest.domain.value_objects import ExecutionParams
from tradelab.contexts.indicators.domain.indicators import CachedIndicator
from tradelab.contexts.strategy.domain.entities import Strategy
from tradelab.platform.numeric import Num
from tradelab.shared_kernel.primitives import BarSeries


@dataclass(frozen=True, slots=True)
class RunBacktestRequest:
    """
    Backtest use-case request: one strategy simulated on one bar series.

    Docs:
      - docs/architecture/backtest-engine.md (sections 4.3 and 6)
    Related:
      - src/tradelab/contexts/backtest/application/use_cases/run_backtest.py
      - src/tradelab/contexts/strategy/application/services/sma_crossover.py
    """

    series: BarSeries
    strategy: Strategy
    params: ExecutionParams | None = None
    price_indicator: CachedIndicator | None = None

    def __post_init__(self) -> None:
        """
        Validate required request fields.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Binding of strategy indicators to `series` is checked by the runner.
        Raises:
            ValueError: If series or strategy are missing.
        Side Effects:
            None.
        """
        if self.series is None:  # type: ignore[truthy-bool]
            raise ValueError("RunBacktestRequest.series is required")
        if self.strategy is None:  # type: ignore[truthy-bool]
            raise ValueError("RunBacktestRequest.strategy is required")


@dataclass(frozen=True, slots=True)
class BacktestReport:
    """
    Completed run summary consumed by reporting collaborators.

    Docs:
      - docs/architecture/backtest-engine.md (section 6, external interfaces)
    Related:
      - src/tradelab/contexts/backtest/application/use_cases/run_backtest.py
      - src/tradelab/contexts/backtest/application/services/criteria/__init__.py
    """

    strategy_name: str
    series_name: str
    positions: tuple[Position, ...]
    open_position: Position | None
    criteria: Mapping[str, Num]

    def __post_init__(self) -> None:
        """
        Validate closed/open position split and freeze criteria mapping.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Criteria keys are criterion display names in report order.
        Raises:
            ValueError: If a closed position is open or the open position is closed.
        Side Effects:
            Replaces `criteria` with read-only mapping proxy.
        """
        object.__setattr__(self, "positions", tuple(self.positions))
        for position in self.positions:
            if position.is_open:
                raise ValueError("BacktestReport.positions must contain closed positions only")
        if self.open_position is not None and self.open_position.is_closed:
            raise ValueError("BacktestReport.open_position must be an open position")
        object.__setattr__(self, "criteria", MappingProxyType(dict(self.criteria)))

    @property
    def trade_count(self) -> int:
        return len(self.positions)

    def to_payload(self) -> dict[str, Any]:
        """
        Build plain payload with numbers rendered as strings.

        Args:
            None.
        Returns:
            dict[str, Any]: JSON-compatible report representation.
        Assumptions:
            String rendering keeps full Decimal precision.
        Raises:
            None.
        Side Effects:
            None.
        """
        return {
            "strategy": self.strategy_name,
            "series": self.series_name,
            "trade_count": self.trade_count,
            "positions": [_position_payload(position) for position in self.positions],
            "open_position": (
                _position_payload(self.open_position) if self.open_position is not None else None
            ),
            "criteria": {name: str(value) for name, value in self.criteria.items()},
        }


def _position_payload(position: Position) -> dict[str, Any]:
    return {
        "side": position.side.value,
        "entry_index": position.entry_index,
        "entry_price": str(position.entry_price),
        "amount": str(position.amount),
        "exit_index": position.exit_index,
        "exit_price": str(position.exit_price) if position.exit_price is not None else None,
    }
