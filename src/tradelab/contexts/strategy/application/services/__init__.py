from .sma_crossover import SMA_CROSSOVER_STRATEGY_NAME, build_sma_crossover_strategy

__all__ = [
    "SMA_CROSSOVER_STRATEGY_NAME",
    "build_sma_crossover_strategy",
]
