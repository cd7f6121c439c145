"""
Swap - Модели формы обмена и жизненного цикла отправки

Immutable Pydantic модели:
- SwapRequest: редактируемое состояние формы (source/target символы, текст суммы)
- FieldError: ошибка валидации одного поля (значение, не exception)
- SwapSnapshot: замороженные цифры preview (сумма, курс, баланс)
- SwapSubmission: запись о текущей отправке (статус, временные метки)

Все изменения создают новый экземпляр (model_copy).
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class SwapField(str, Enum):
    """Поля формы, к которым привязываются ошибки валидации."""

    SOURCE_AMOUNT = "sourceAmount"
    SOURCE_INSTRUMENT = "sourceInstrument"
    TARGET_INSTRUMENT = "targetInstrument"


class SubmissionStatus(str, Enum):
    """
    Статус отправки обмена.

    IDLE → PREVIEWING → CONFIRMING → SETTLED → (auto-reset) → IDLE
    RESET проставляется записи, завершённой через auto-reset.
    """

    IDLE = "idle"
    PREVIEWING = "previewing"
    CONFIRMING = "confirming"
    SETTLED = "settled"
    RESET = "reset"


# =============================================================================
# FORM STATE
# =============================================================================


class SwapRequest(BaseModel):
    """
    Состояние формы обмена.

    source_amount_text всегда синтаксически валиден: текст, не прошедший
    грамматику суммы, в состояние не попадает.
    """

    source_symbol: str = Field("USD", description="Символ продаваемого инструмента ('' = не выбран)")
    target_symbol: str = Field("ETH", description="Символ покупаемого инструмента ('' = не выбран)")
    source_amount_text: str = Field("", pattern=r"^[0-9]*\.?[0-9]*$", description="Введённая сумма")

    model_config = {"frozen": True}


class FieldError(BaseModel):
    """Ошибка валидации поля формы. Не более одной на поле."""

    field: SwapField
    message: str = Field(..., min_length=1)

    model_config = {"frozen": True}


# =============================================================================
# SUBMISSION
# =============================================================================


class SwapSnapshot(BaseModel):
    """
    Замороженные цифры preview.

    Захватываются в момент запроса preview и больше не пересчитываются:
    изменение цен после этого не меняет то, что подтверждает пользователь.
    """

    source_symbol: str = Field(..., min_length=1)
    target_symbol: str = Field(..., min_length=1)
    source_amount_text: str
    target_amount_text: str
    source_amount: float = Field(..., gt=0)
    exchange_rate: float = Field(..., ge=0)
    exchange_rate_text: str
    source_balance: float = Field(..., ge=0)
    captured_at: datetime

    model_config = {"frozen": True}


class SwapSubmission(BaseModel):
    """Запись о текущей отправке. Единственный writer - SwapSubmissionFlow."""

    status: SubmissionStatus
    snapshot: SwapSnapshot
    started_at: datetime
    settled_at: Optional[datetime] = None

    model_config = {"frozen": True}
