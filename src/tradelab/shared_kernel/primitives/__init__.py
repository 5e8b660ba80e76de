"""
Shared Kernel primitives.

This package re-exports the minimal set of domain primitives so that bounded contexts
can import them from one place:

    from tradelab.shared_kernel.primitives import Bar, BarSeries, PositionSide
"""

from .bar import Bar
from .bar_series import BarSeries
from .position_side import PositionSide

__all__ = [
    "Bar",
    "BarSeries",
    "PositionSide",
]
