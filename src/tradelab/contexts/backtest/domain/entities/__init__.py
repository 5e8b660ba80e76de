from .trading_record import Position, TradingRecord

__all__ = [
    "Position",
    "TradingRecord",
]
