from __future__ import annotations

from dataclasses import dataclass

from tradelab.platform.numeric import Num


@dataclass(frozen=True, slots=True)
class Bar:
    """
    Bar — one OHLCV sample of a bar series at a discrete time step.

    Поля:
    - timestamp: целочисленный порядковый номер времени (epoch ms, день, ...)
    - open/high/low/close/volume: значения в числовом представлении серии
    """

    timestamp: int

    open: Num
    high: Num
    low: Num
    close: Num
    volume: Num

    def __post_init__(self) -> None:
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise ValueError(f"Bar requires int timestamp, got {self.timestamp!r}")

        for name in ("open", "high", "low", "close", "volume"):
            value = getattr(self, name)
            if value is None:
                raise ValueError(f"Bar requires non-null {name}")
            # NaN != NaN для Decimal и numpy
            if value != value:
                raise ValueError(f"Bar requires non-NaN {name}")

        # OHLC инварианты
        if self.high < max(self.open, self.close):
            raise ValueError("Bar requires high >= max(open, close)")
        if self.low > min(self.open, self.close):
            raise ValueError("Bar requires low <= min(open, close)")
        if self.volume < 0:
            raise ValueError("Bar requires volume >= 0")

    def as_dict(self) -> dict:
        """Сериализация бара как объекта (числа как str, чтобы не терять точность Decimal)."""
        return {
            "timestamp": self.timestamp,
            "open": str(self.open),
            "high": str(self.high),
            "low": str(self.low),
            "close": str(self.close),
            "volume": str(self.volume),
        }
