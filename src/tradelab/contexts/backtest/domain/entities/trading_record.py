from __future__ import annotations

from dataclasses import dataclass, replace

from tradelab.platform.numeric import Num, NumericPolicy
from tradelab.shared_kernel.primitives import PositionSide


@dataclass(frozen=True, slots=True)
class Position:
    """
    Position — one simulated round trip, open until `exit_index` is set.

    Docs:
      - docs/architecture/backtest-engine.md (section 3, data model)
    Related:
      - src/tradelab/contexts/backtest/domain/entities/trading_record.py
      - src/tradelab/contexts/backtest/application/services/criteria/analysis_criterion.py
      - tests/unit/contexts/backtest/domain/entities/test_trading_record.py
    """

    side: PositionSide
    entry_index: int
    entry_price: Num
    amount: Num
    exit_index: int | None = None
    exit_price: Num | None = None

    def __post_init__(self) -> None:
        """
        Validate open/closed position invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Prices and amount are produced by the series numeric policy.
        Raises:
            ValueError: If indices are negative, exit fields are half-set or
                `exit_index <= entry_index`.
        Side Effects:
            Normalizes `side` literal into `PositionSide`.
        """
        object.__setattr__(self, "side", PositionSide.parse(self.side))
        if self.entry_index < 0:
            raise ValueError("Position.entry_index must be >= 0")
        if self.amount <= 0:
            raise ValueError("Position.amount must be > 0")
        if (self.exit_index is None) != (self.exit_price is None):
            raise ValueError("Position.exit_index and Position.exit_price must be set together")
        if self.exit_index is not None and self.exit_index <= self.entry_index:
            raise ValueError(
                "Position.exit_index must be > entry_index, got "
                f"{self.exit_index} <= {self.entry_index}"
            )

    @property
    def is_open(self) -> bool:
        return self.exit_index is None

    @property
    def is_closed(self) -> bool:
        return self.exit_index is not None

    def close(self, *, exit_index: int, exit_price: Num) -> Position:
        """
        Return closed copy of this open position.

        Args:
            exit_index: Bar index of the exit, strictly after entry.
            exit_price: Exit fill price.
        Returns:
            Position: New closed position snapshot.
        Assumptions:
            None.
        Raises:
            ValueError: If position is already closed or exit index is not after entry.
        Side Effects:
            None.
        """
        if self.is_closed:
            raise ValueError("Position is already closed")
        return replace(self, exit_index=exit_index, exit_price=exit_price)

    def profit(self, num: NumericPolicy) -> Num:
        """
        Return realized profit `(exit - entry) * amount * side.sign`.

        Raises:
            ValueError: If position is still open.
        """
        if self.exit_price is None:
            raise ValueError("Position.profit is defined for closed positions only")
        return self._profit_at(num=num, price=self.exit_price)

    def unrealized_profit(self, num: NumericPolicy, *, price: Num) -> Num:
        """Return mark-to-market profit of the position at `price`."""
        return self._profit_at(num=num, price=price)

    def _profit_at(self, *, num: NumericPolicy, price: Num) -> Num:
        gross = num.multiply(num.subtract(price, self.entry_price), self.amount)
        if self.side is PositionSide.SHORT:
            return num.subtract(num.zero(), gross)
        return gross


class TradingRecord:
    """
    TradingRecord — chronological positions of one run, at most one of them open.

    Closed positions do not overlap and are time-ordered: every entry happens strictly after
    the previous exit. The record is filled by the strategy runner and read by criteria.

    Docs:
      - docs/architecture/backtest-engine.md (sections 3 and 4.3)
    Related:
      - src/tradelab/contexts/backtest/application/services/strategy_runner.py
      - src/tradelab/contexts/strategy/domain/rules/stop_rules.py
      - tests/unit/contexts/backtest/domain/entities/test_trading_record.py
    """

    def __init__(self, *, side: PositionSide | str = PositionSide.LONG) -> None:
        self._side = PositionSide.parse(side)
        self._closed: list[Position] = []
        self._current: Position | None = None

    @property
    def side(self) -> PositionSide:
        return self._side

    @property
    def current_position(self) -> Position | None:
        """Open position or `None` when flat."""
        return self._current

    @property
    def positions(self) -> tuple[Position, ...]:
        """Closed positions in chronological order."""
        return tuple(self._closed)

    @property
    def position_count(self) -> int:
        return len(self._closed)

    @property
    def is_closed(self) -> bool:
        """True when no position is open."""
        return self._current is None

    @property
    def last_position(self) -> Position | None:
        """Last closed position or `None`."""
        if not self._closed:
            return None
        return self._closed[-1]

    def enter(self, *, index: int, price: Num, amount: Num) -> Position:
        """
        Open new position on record side.

        Args:
            index: Entry bar index.
            price: Entry fill price.
            amount: Position size.
        Returns:
            Position: Opened position.
        Assumptions:
            Caller visits bars in increasing index order.
        Raises:
            ValueError: If a position is already open or index is not after the last exit.
        Side Effects:
            Stores opened position as current position.
        """
        if self._current is not None:
            raise ValueError(
                f"cannot enter at index {index}: position opened at "
                f"{self._current.entry_index} is still open"
            )
        last = self.last_position
        if last is not None and last.exit_index is not None and index <= last.exit_index:
            raise ValueError(
                f"cannot enter at index {index}: previous position exited at {last.exit_index}"
            )
        self._current = Position(
            side=self._side,
            entry_index=index,
            entry_price=price,
            amount=amount,
        )
        return self._current

    def exit(self, *, index: int, price: Num) -> Position:
        """
        Close current position.

        Args:
            index: Exit bar index, strictly after entry.
            price: Exit fill price.
        Returns:
            Position: Closed position.
        Assumptions:
            None.
        Raises:
            ValueError: If no position is open or `index <= entry_index`.
        Side Effects:
            Appends closed position and clears current position.
        """
        if self._current is None:
            raise ValueError(f"cannot exit at index {index}: no open position")
        closed = self._current.close(exit_index=index, exit_price=price)
        self._closed.append(closed)
        self._current = None
        return closed

    def __repr__(self) -> str:
        return (
            f"TradingRecord(side={self._side.value}, closed={len(self._closed)}, "
            f"open={self._current is not None})"
        )
