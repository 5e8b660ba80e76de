from .errors import configuration_failure, map_backtest_exception, validation_error
from .run_backtest import RunBacktestUseCase

__all__ = [
    "RunBacktestUseCase",
    "configuration_failure",
    "map_backtest_exception",
    "validation_error",
]
