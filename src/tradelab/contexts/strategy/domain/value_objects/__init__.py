from .sma_crossover_params import SmaCrossoverParams

__all__ = [
    "SmaCrossoverParams",
]
