"""
Conversion - Курс обмена, конверсия сумм и форматирование для отображения

Чистые функции без I/O и без разделяемого состояния:
- exchange_rate: курс source → target (source.price / target.price)
- convert: сумма source → сумма target по курсу
- format_display: детерминированное текстовое представление суммы/курса
- format_balance: отображение баланса (разделители тысяч, до 3 знаков)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. exchange_rate никогда не бросает: отсутствующий инструмент или нулевая
   цена source → 0.0 (деградированное значение, не ошибка)
2. format_display(0) == "0"; значения < 0.01 всегда с 8 знаками
3. Округление половины - от нуля, по точному двоичному значению float
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Final, Optional

from src.core.domain.instrument import Instrument
from src.core.math.numerical_safeguards import (
    is_valid_float,
    sanitize_float,
)

# =============================================================================
# ПАРАМЕТРЫ ФОРМАТИРОВАНИЯ
# =============================================================================

# Максимум знаков после точки для обычных значений
DISPLAY_MAX_DECIMALS_DEFAULT: Final[int] = 6

# Значения строго меньше порога выводятся с фиксированной точностью,
# чтобы малая ненулевая сумма не отображалась как "0"
SMALL_VALUE_THRESHOLD: Final[float] = 0.01
SMALL_VALUE_DECIMALS: Final[int] = 8

# Максимум знаков после точки для баланса
BALANCE_MAX_DECIMALS: Final[int] = 3


# =============================================================================
# КУРС И КОНВЕРСИЯ
# =============================================================================


def exchange_rate(source: Optional[Instrument], target: Optional[Instrument]) -> float:
    """
    Курс обмена: сколько единиц target даёт одна единица source.

    Args:
        source: Продаваемый инструмент (или None)
        target: Покупаемый инструмент (или None)

    Returns:
        source.price / target.price, либо 0.0 если инструмент отсутствует
        или source.price == 0

    Examples:
        >>> exchange_rate(usd, eth)  # USD=1, ETH=2000
        0.0005
        >>> exchange_rate(None, eth)
        0.0
    """
    if source is None or target is None or source.price == 0:
        return 0.0

    # target.price > 0 гарантирован Instrument
    return source.price / target.price


def convert(amount: float, source: Optional[Instrument], target: Optional[Instrument]) -> float:
    """
    Конверсия суммы source в сумму target.

    ФОРМУЛА:
        converted = amount * exchange_rate(source, target)
    """
    return sanitize_float(amount * exchange_rate(source, target), fallback=0.0)


# =============================================================================
# ФОРМАТИРОВАНИЕ
# =============================================================================


def _to_fixed(value: float, decimals: int) -> str:
    """Фиксированная запись с decimals знаками, округление half-up."""
    exact = Decimal(value)
    quantum = Decimal(1).scaleb(-decimals)

    with localcontext() as ctx:
        ctx.prec = max(28, exact.adjusted() + decimals + 2)
        rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)

    return format(rounded, "f")


def format_display(value: float, max_decimals: int = DISPLAY_MAX_DECIMALS_DEFAULT) -> str:
    """
    Форматирование числа для отображения.

    Правила:
    - 0 → "0"
    - value < 0.01 → ровно 8 знаков после точки (без удаления нулей)
    - иначе → до max_decimals знаков, хвостовые нули и одинокая точка удаляются

    NaN/Inf отображаются как "0".

    Args:
        value: Значение для отображения
        max_decimals: Максимум знаков после точки (default: 6)

    Returns:
        Строковое представление

    Examples:
        >>> format_display(0)
        '0'
        >>> format_display(0.00000001)
        '0.00000001'
        >>> format_display(1.5)
        '1.5'
        >>> format_display(2.000000)
        '2'
    """
    if max_decimals < 0:
        raise ValueError(f"max_decimals must be non-negative, got {max_decimals}")

    if not is_valid_float(value) or value == 0:
        return "0"

    if value < SMALL_VALUE_THRESHOLD:
        return _to_fixed(value, SMALL_VALUE_DECIMALS)

    formatted = _to_fixed(value, max_decimals)
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    return formatted


def format_balance(value: float) -> str:
    """
    Отображение баланса: разделители тысяч, не более 3 знаков после точки.

    Examples:
        >>> format_balance(566.6)
        '566.6'
        >>> format_balance(1000)
        '1,000'
        >>> format_balance(0)
        '0'
    """
    formatted = f"{sanitize_float(float(value)):,.{BALANCE_MAX_DECIMALS}f}"
    formatted = formatted.rstrip("0").rstrip(".")
    if formatted in ("", "-0"):
        return "0"
    return formatted
