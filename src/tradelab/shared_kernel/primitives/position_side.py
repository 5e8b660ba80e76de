from __future__ import annotations

from enum import Enum


class PositionSide(str, Enum):
    """
    PositionSide — direction of a simulated position.

    LONG enters with a buy and profits from rising prices, SHORT enters with a sell.
    """

    LONG = "long"
    SHORT = "short"

    @property
    def sign(self) -> int:
        """+1 for long, -1 for short (multiplier of `exit - entry`)."""
        return 1 if self is PositionSide.LONG else -1

    @classmethod
    def parse(cls, raw: str | PositionSide) -> PositionSide:
        if isinstance(raw, PositionSide):
            return raw
        normalized = str(raw).strip().lower()
        for side in cls:
            if side.value == normalized:
                return side
        raise ValueError(f"Unsupported position side={raw!r}. Supported: {[s.value for s in cls]}")
