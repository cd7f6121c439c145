"""Валидация формы обмена - чистая функция от текущего состояния.

validate(request, catalog, ledger, holder) → {SwapField: FieldError}

Все правила пересчитываются целиком при каждом изменении, без памяти о
прошлых ошибках. Каждое правило привязано к своему полю, не более одной
ошибки на поле:
- sourceInstrument: обязателен, должен быть в каталоге
- targetInstrument: обязателен, не равен source (self-swap), должен быть в каталоге
- sourceAmount: обязателен → число → > 0 → достаточность баланса

Достаточность баланса проверяется только если source разрешён и текст
парсится в число: нечисловой непустой текст по этому правилу валиден,
ошибка остаётся за правилом формата (две ошибки не складываются).
"""

import math
import re
from decimal import Decimal
from typing import Dict, Final, Optional

from src.catalog.price_catalog import CatalogSnapshot
from src.core.domain.swap import FieldError, SwapField, SwapRequest
from src.core.math.conversion import format_balance
from src.ledger.balance_ledger import BalanceLedger

# Грамматика суммы: цифры, одна необязательная точка, цифры (пустая строка допустима)
AMOUNT_PATTERN: Final = re.compile(r"^[0-9]*\.?[0-9]*$")

# =============================================================================
# СООБЩЕНИЯ
# =============================================================================

MSG_SOURCE_REQUIRED: Final[str] = "Please select a token to swap from"
MSG_TARGET_REQUIRED: Final[str] = "Please select a token to swap to"
MSG_SAME_TOKEN: Final[str] = "Cannot swap to the same token"
MSG_AMOUNT_REQUIRED: Final[str] = "Please enter an amount"
MSG_AMOUNT_INVALID: Final[str] = "Please enter a valid amount"
MSG_AMOUNT_NOT_POSITIVE: Final[str] = "Amount must be greater than zero"
MSG_TOKEN_UNAVAILABLE: Final[str] = "Token {symbol} is not available"
MSG_INSUFFICIENT_BALANCE: Final[str] = "Insufficient balance. You have {balance} {symbol}"


# =============================================================================
# ГРАММАТИКА СУММЫ
# =============================================================================


def is_amount_text(text: str) -> bool:
    """True если text проходит грамматику суммы."""
    return AMOUNT_PATTERN.fullmatch(text) is not None


def parse_amount(text: str) -> Optional[float]:
    """
    Парсинг текста суммы.

    Returns:
        Конечное число, либо None для пустого/нечислового текста ("", ".")
    """
    if not text or not is_amount_text(text):
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def amount_to_text(value: float) -> str:
    """Число → текст, проходящий грамматику суммы (без экспоненты)."""
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


# =============================================================================
# ПРАВИЛА
# =============================================================================


def _source_instrument_error(request: SwapRequest, catalog: CatalogSnapshot) -> Optional[str]:
    if not request.source_symbol:
        return MSG_SOURCE_REQUIRED
    if catalog.lookup(request.source_symbol) is None:
        return MSG_TOKEN_UNAVAILABLE.format(symbol=request.source_symbol)
    return None


def _target_instrument_error(request: SwapRequest, catalog: CatalogSnapshot) -> Optional[str]:
    if not request.target_symbol:
        return MSG_TARGET_REQUIRED
    if request.target_symbol == request.source_symbol:
        return MSG_SAME_TOKEN
    if catalog.lookup(request.target_symbol) is None:
        return MSG_TOKEN_UNAVAILABLE.format(symbol=request.target_symbol)
    return None


def _source_amount_error(
    request: SwapRequest,
    catalog: CatalogSnapshot,
    ledger: BalanceLedger,
    holder: str,
) -> Optional[str]:
    text = request.source_amount_text
    if not text:
        return MSG_AMOUNT_REQUIRED

    amount = parse_amount(text)
    if amount is None:
        return MSG_AMOUNT_INVALID
    if amount <= 0:
        return MSG_AMOUNT_NOT_POSITIVE

    source = catalog.lookup(request.source_symbol)
    if source is None:
        return None

    balance = ledger.balance_of(holder, source.symbol)
    if balance == 0 or amount > balance:
        return MSG_INSUFFICIENT_BALANCE.format(
            balance=format_balance(balance), symbol=source.symbol
        )
    return None


def validate(
    request: SwapRequest,
    catalog: CatalogSnapshot,
    ledger: BalanceLedger,
    holder: str,
) -> Dict[SwapField, FieldError]:
    """
    Полный пересчёт ошибок формы.

    Args:
        request: Текущее состояние формы
        catalog: Снапшот каталога инструментов
        ledger: Снапшот балансов
        holder: Держатель, чьи балансы проверяются

    Returns:
        Ошибки по полям (поле без ошибки отсутствует в dict)
    """
    checks = (
        (SwapField.SOURCE_INSTRUMENT, _source_instrument_error(request, catalog)),
        (SwapField.TARGET_INSTRUMENT, _target_instrument_error(request, catalog)),
        (SwapField.SOURCE_AMOUNT, _source_amount_error(request, catalog, ledger, holder)),
    )
    return {
        field: FieldError(field=field, message=message)
        for field, message in checks
        if message is not None
    }
