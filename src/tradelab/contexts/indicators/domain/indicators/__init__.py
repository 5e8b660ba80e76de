from .cached_indicator import CachedIndicator, validate_upstream, validate_window
from .helpers import (
    ClosePriceIndicator,
    ConstantIndicator,
    HighPriceIndicator,
    LowPriceIndicator,
    OpenPriceIndicator,
    VolumeIndicator,
)
from .moving_average import EMAIndicator, SMAIndicator

__all__ = [
    "CachedIndicator",
    "ClosePriceIndicator",
    "ConstantIndicator",
    "EMAIndicator",
    "HighPriceIndicator",
    "LowPriceIndicator",
    "OpenPriceIndicator",
    "SMAIndicator",
    "VolumeIndicator",
    "validate_upstream",
    "validate_window",
]
