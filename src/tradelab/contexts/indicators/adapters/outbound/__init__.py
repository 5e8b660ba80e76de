"""
Outbound adapters for indicators bounded context.
"""

from .compute_numpy import (
    compute_ma_grid_f64,
    compute_ma_series_f64,
    is_supported_ma_indicator,
)

__all__ = [
    "compute_ma_grid_f64",
    "compute_ma_series_f64",
    "is_supported_ma_indicator",
]
