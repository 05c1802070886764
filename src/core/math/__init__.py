"""
Core math modules

Математические примитивы для денежных и весовых расчётов с гарантией стабильности.
"""

from src.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_CALC,
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    EPS_ROUNDING,
    # NaN/Inf checks
    is_valid_float,
    # Epsilon comparisons
    is_close,
    # Rounding
    ceil_with_tolerance,
    floor_with_tolerance,
    round_to_epsilon,
    truncate_with_tolerance,
    # Validation
    validate_non_negative,
    validate_positive,
)

__all__ = [
    "EPS_CALC",
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    "EPS_ROUNDING",
    "is_valid_float",
    "is_close",
    "ceil_with_tolerance",
    "floor_with_tolerance",
    "round_to_epsilon",
    "truncate_with_tolerance",
    "validate_non_negative",
    "validate_positive",
]
