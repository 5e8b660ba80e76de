from .numeric_policy import (
    DecimalNumericPolicy,
    FloatNumericPolicy,
    Num,
    NumericPolicy,
    build_numeric_policy,
)

__all__ = [
    "DecimalNumericPolicy",
    "FloatNumericPolicy",
    "Num",
    "NumericPolicy",
    "build_numeric_policy",
]
