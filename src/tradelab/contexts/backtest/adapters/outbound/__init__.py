"""
Outbound adapters for backtest bounded context.
"""

from .config import (
    BacktestNumericRuntimeConfig,
    BacktestRuntimeConfig,
    load_backtest_runtime_config,
    load_backtest_runtime_config_from_env,
    resolve_backtest_config_path,
)

__all__ = [
    "BacktestNumericRuntimeConfig",
    "BacktestRuntimeConfig",
    "load_backtest_runtime_config",
    "load_backtest_runtime_config_from_env",
    "resolve_backtest_config_path",
]
