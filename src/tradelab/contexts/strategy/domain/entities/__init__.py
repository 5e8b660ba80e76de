from .strategy import Strategy

__all__ = [
    "Strategy",
]
