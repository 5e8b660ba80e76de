from .entities import Position, TradingRecord
from .value_objects import EndOfSeriesPolicy, ExecutionParams

__all__ = [
    "EndOfSeriesPolicy",
    "ExecutionParams",
    "Position",
    "TradingRecord",
]
