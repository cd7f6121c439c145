"""
Instrument - Модели ценового фида и инструментов

Immutable Pydantic модели:
- PriceQuote: одно наблюдение цены из внешнего фида (currency/date/price)
- Instrument: торгуемый символ с текущей ценой (всегда > 0)
- HolderBalance: доступный баланс держателя по одному символу

Инвариант: Instrument никогда не создаётся с неположительной ценой.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# PRICE QUOTE
# =============================================================================


class PriceQuote(BaseModel):
    """
    Наблюдение цены из фида.

    Поля фида: {currency, date, price}. Несколько котировок на один символ
    допустимы, каталог оставляет только последнюю по observed_at.
    price может отсутствовать (None): такая котировка участвует в выборе
    последней, но инструмента не даёт.
    """

    instrument_symbol: str = Field(..., alias="currency", min_length=1)
    observed_at: datetime = Field(..., alias="date")
    price: Optional[Annotated[float, Field(ge=0, allow_inf_nan=False)]] = None

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("observed_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamp трактуется как UTC (иначе сравнение aware/naive падает)."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# =============================================================================
# INSTRUMENT
# =============================================================================


class Instrument(BaseModel):
    """
    Торгуемый инструмент с текущей ценой за единицу.

    Создаётся каталогом из последней валидной котировки.
    """

    symbol: str = Field(..., min_length=1, description="Уникальный символ (ключ)")
    price: float = Field(..., gt=0, allow_inf_nan=False, description="Цена за единицу")
    icon_ref: str = Field(..., description="Ссылка на иконку для presentation слоя")

    model_config = {"frozen": True}

    @property
    def fallback_glyph(self) -> str:
        """Два первых символа тикера (если иконка не загрузилась)."""
        return self.symbol[:2]


# =============================================================================
# HOLDER BALANCE
# =============================================================================


class HolderBalance(BaseModel):
    """Баланс держателя по одному инструменту."""

    instrument_symbol: str = Field(..., alias="symbol", min_length=1)
    amount: float = Field(..., ge=0, allow_inf_nan=False)

    model_config = {"frozen": True, "populate_by_name": True}
