from .execution_params import EndOfSeriesPolicy, ExecutionParams

__all__ = [
    "EndOfSeriesPolicy",
    "ExecutionParams",
]
