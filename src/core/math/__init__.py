"""
Core math modules для swap-core

Математические примитивы, курс обмена и форматирование сумм.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    # NaN/Inf sanitization
    is_valid_float,
    sanitize_float,
    # Epsilon comparisons
    is_close,
    # Validation
    validate_non_negative,
    validate_positive,
)

# Conversion
from src.core.math.conversion import (
    BALANCE_MAX_DECIMALS,
    DISPLAY_MAX_DECIMALS_DEFAULT,
    SMALL_VALUE_DECIMALS,
    SMALL_VALUE_THRESHOLD,
    convert,
    exchange_rate,
    format_balance,
    format_display,
)

__all__ = [
    # Numerical Safeguards - Epsilon constants
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    # Numerical Safeguards - NaN/Inf sanitization
    "is_valid_float",
    "sanitize_float",
    # Numerical Safeguards - Epsilon comparisons
    "is_close",
    # Numerical Safeguards - Validation
    "validate_non_negative",
    "validate_positive",
    # Conversion - Constants
    "BALANCE_MAX_DECIMALS",
    "DISPLAY_MAX_DECIMALS_DEFAULT",
    "SMALL_VALUE_DECIMALS",
    "SMALL_VALUE_THRESHOLD",
    # Conversion - Functions
    "convert",
    "exchange_rate",
    "format_balance",
    "format_display",
]
