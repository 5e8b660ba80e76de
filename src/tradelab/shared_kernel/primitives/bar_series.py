from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import numpy as np

from tradelab.platform.numeric import DecimalNumericPolicy, Num, NumericPolicy

from .bar import Bar

_ROW_FIELDS = ("timestamp", "open", "high", "low", "close", "volume")


@dataclass(frozen=True, slots=True, eq=False)
class BarSeries:
    """
    Immutable ordered sequence of bars sharing one numeric policy.

    Indices are stable for the lifetime of the series, which is what lets indicators cache
    their values by index. Identity (not equality) is used to check that indicators and rules
    are bound to the simulated series.

    Docs:
      - docs/architecture/backtest-engine.md (section 3, data model)
    Related:
      - src/tradelab/shared_kernel/primitives/bar.py
      - src/tradelab/contexts/indicators/domain/indicators/cached_indicator.py
      - src/tradelab/contexts/backtest/application/services/strategy_runner.py
    """

    name: str
    bars: tuple[Bar, ...]
    num: NumericPolicy = field(default_factory=DecimalNumericPolicy)

    def __post_init__(self) -> None:
        """
        Validate series name, numeric representation and strict timestamp ordering.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Ingestion collaborator already converted bar values with `num`.
        Raises:
            ValueError: If name is blank, a bar has foreign numeric type or order is broken.
        Side Effects:
            Normalizes `name` and freezes `bars` into a tuple.
        """
        normalized_name = self.name.strip()
        if not normalized_name:
            raise ValueError("BarSeries.name must be non-empty")
        object.__setattr__(self, "name", normalized_name)

        bars = tuple(self.bars)
        object.__setattr__(self, "bars", bars)

        expected_type = type(self.num.zero())
        previous_timestamp: int | None = None
        for index, bar in enumerate(bars):
            if not isinstance(bar, Bar):
                raise ValueError(f"BarSeries.bars[{index}] must be a Bar")
            if not isinstance(bar.close, expected_type):
                raise ValueError(
                    f"BarSeries.bars[{index}] uses {type(bar.close).__name__}, "
                    f"series numeric policy expects {expected_type.__name__}"
                )
            if previous_timestamp is not None and bar.timestamp <= previous_timestamp:
                raise ValueError(
                    "BarSeries bars must be strictly ordered by timestamp: "
                    f"index={index}, timestamp={bar.timestamp}, previous={previous_timestamp}"
                )
            previous_timestamp = bar.timestamp

    @classmethod
    def from_rows(
        cls,
        *,
        name: str,
        rows: Iterable[Mapping[str, Any]],
        num: NumericPolicy | None = None,
    ) -> BarSeries:
        """
        Build series from plain rows provided by an ingestion collaborator.

        Args:
            name: Series name (instrument label).
            rows: Mappings with `timestamp`, `open`, `high`, `low`, `close` and optional `volume`.
            num: Numeric policy; defaults to `DecimalNumericPolicy()`.
        Returns:
            BarSeries: Validated series with values converted by `num`.
        Assumptions:
            Missing `volume` is treated as zero.
        Raises:
            ValueError: If a row misses a required field, a value does not fit `num` or a bar
                violates bar invariants.
        Side Effects:
            None.
        """
        policy = num if num is not None else DecimalNumericPolicy()
        bars: list[Bar] = []
        for index, row in enumerate(rows):
            missing = [key for key in _ROW_FIELDS[:5] if row.get(key) is None]
            if missing:
                raise ValueError(f"row {index} misses required fields: {missing}")
            bars.append(
                Bar(
                    timestamp=int(row["timestamp"]),
                    open=policy.of(row["open"]),
                    high=policy.of(row["high"]),
                    low=policy.of(row["low"]),
                    close=policy.of(row["close"]),
                    volume=policy.of(row.get("volume", 0)),
                )
            )
        return cls(name=name, bars=tuple(bars), num=policy)

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def bar_count(self) -> int:
        return len(self.bars)

    @property
    def is_empty(self) -> bool:
        return len(self.bars) == 0

    @property
    def begin_index(self) -> int:
        return 0

    @property
    def end_index(self) -> int:
        """Last valid index, `-1` for an empty series."""
        return len(self.bars) - 1

    def bar(self, index: int) -> Bar:
        """
        Return bar at index.

        Raises:
            IndexError: If index is outside `[0, bar_count)`.
        """
        if index < 0 or index >= len(self.bars):
            raise IndexError(f"bar index {index} outside [0, {len(self.bars)}) of {self.name!r}")
        return self.bars[index]

    def num_of(self, value: Any) -> Num:
        """Convert scalar with the series numeric policy."""
        return self.num.of(value)

    def close_array(self) -> np.ndarray:
        """
        Export close prices as float64 C-contiguous vector for vectorized consumers.

        Args:
            None.
        Returns:
            np.ndarray: Close prices `(T,)`.
        Assumptions:
            Decimal closes are converted through `float()`, so this is a lossy view.
        Raises:
            None.
        Side Effects:
            Allocates one array.
        """
        return np.ascontiguousarray(
            [float(bar.close) for bar in self.bars],
            dtype=np.float64,
        )
