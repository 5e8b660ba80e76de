"""
Adapters package for backtest bounded context.
"""

from .outbound import (
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
