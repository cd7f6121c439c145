"""
Contract Validation Module

Модуль для валидации JSON контрактов внешних коллабораторов (price feed, балансы).
"""

from .validators import (
    BalanceSheetValidator,
    ContractValidator,
    PriceFeedValidator,
    SchemaLoader,
    validate_balance_sheet,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PriceFeedValidator",
    "BalanceSheetValidator",
    # Functions
    "validate_balance_sheet",
]
