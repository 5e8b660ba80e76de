from .run_backtest import BacktestReport, RunBacktestRequest

__all__ = [
    "BacktestReport",
    "RunBacktestRequest",
]
