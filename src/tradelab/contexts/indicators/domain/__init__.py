from .indicators import (
    CachedIndicator,
    ClosePriceIndicator,
    ConstantIndicator,
    EMAIndicator,
    HighPriceIndicator,
    LowPriceIndicator,
    OpenPriceIndicator,
    SMAIndicator,
    VolumeIndicator,
)

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
]
