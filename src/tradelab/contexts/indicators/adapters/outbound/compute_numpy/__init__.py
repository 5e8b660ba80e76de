"""
Numpy oracle adapters for indicators compute validation.

Docs: docs/architecture/backtest-engine.md (section 4.1)
Related: tradelab.contexts.indicators.domain.indicators.moving_average
"""

from .ma import compute_ma_grid_f64, compute_ma_series_f64, is_supported_ma_indicator

__all__ = [
    "compute_ma_grid_f64",
    "compute_ma_series_f64",
    "is_supported_ma_indicator",
]
