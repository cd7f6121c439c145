"""SwapFormController - редактируемое состояние формы обмена.

Владеет SwapRequest и производными значениями. На каждое изменение поля:
1. source/target инструменты заново ищутся в текущем снапшоте каталога
2. если сумма парсится в конечное число > 0 и оба инструмента найдены -
   target_amount_text = format_display(convert(...)), иначе ""
3. ошибки пересчитываются целиком через validate()

Каталог и ledger читаются одним снапшотом на одно вычисление.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from src.catalog.price_catalog import CatalogSnapshot, PriceCatalog
from src.core.domain.instrument import Instrument
from src.core.domain.swap import FieldError, SwapField, SwapRequest
from src.core.math.conversion import convert, exchange_rate, format_display
from src.ledger.balance_ledger import BalanceLedger
from src.swap.validation import amount_to_text, is_amount_text, parse_amount, validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormState:
    """Снапшот формы: запрос + производные read-only значения."""

    request: SwapRequest
    source_instrument: Optional[Instrument]
    target_instrument: Optional[Instrument]
    target_amount_text: str
    errors: Mapping[SwapField, FieldError] = field(default_factory=dict)
    is_submittable: bool = False
    exchange_rate: float = 0.0
    source_balance: Optional[float] = None

    @property
    def shows_rate(self) -> bool:
        """Курс показывается при обоих инструментах и непустой сумме."""
        return (
            self.source_instrument is not None
            and self.target_instrument is not None
            and bool(self.request.source_amount_text)
        )

    @property
    def exchange_rate_text(self) -> str:
        return format_display(self.exchange_rate) if self.shows_rate else ""

    @property
    def rate_label(self) -> Optional[str]:
        if not self.shows_rate:
            return None
        return (
            f"1 {self.source_instrument.symbol} = "
            f"{self.exchange_rate_text} {self.target_instrument.symbol}"
        )

    def error_for(self, swap_field: SwapField) -> Optional[str]:
        error = self.errors.get(swap_field)
        return error.message if error is not None else None


def derive_state(
    request: SwapRequest,
    catalog: CatalogSnapshot,
    ledger: BalanceLedger,
    holder: str,
    errors: Optional[Mapping[SwapField, FieldError]] = None,
) -> FormState:
    """
    Вычисление FormState из запроса и снапшотов.

    Args:
        errors: Готовые ошибки (None → полный пересчёт через validate)
    """
    source = catalog.lookup(request.source_symbol)
    target = catalog.lookup(request.target_symbol)

    amount = parse_amount(request.source_amount_text)
    if amount is not None and amount > 0 and source is not None and target is not None:
        target_amount_text = format_display(convert(amount, source, target))
    else:
        target_amount_text = ""

    if errors is None:
        errors = validate(request, catalog, ledger, holder)

    is_submittable = (
        not errors
        and source is not None
        and target is not None
        and bool(request.source_amount_text)
    )

    return FormState(
        request=request,
        source_instrument=source,
        target_instrument=target,
        target_amount_text=target_amount_text,
        errors=MappingProxyType(dict(errors)),
        is_submittable=is_submittable,
        exchange_rate=exchange_rate(source, target),
        source_balance=ledger.balance_of(holder, source.symbol) if source is not None else None,
    )


class SwapFormController:
    """Контроллер формы обмена.

    Единственный владелец SwapRequest. PriceCatalog и BalanceLedger - внешнее
    read-only состояние, обновляемое коллабораторами (fetcher, wallet service).
    """

    def __init__(
        self,
        catalog: PriceCatalog,
        ledger: BalanceLedger,
        holder: str,
        request: Optional[SwapRequest] = None,
    ):
        """
        Args:
            catalog: каталог инструментов (читается текущий снапшот)
            ledger: снапшот балансов
            holder: держатель (кошелёк), чьи балансы проверяются
            request: начальное состояние формы (default: USD → ETH, пустая сумма)
        """
        self._catalog = catalog
        self._ledger = ledger
        self.holder = holder
        self._state = derive_state(request or SwapRequest(), catalog.snapshot, ledger, holder)

    # -------------------------------------------------------------------------
    # Read-only значения
    # -------------------------------------------------------------------------

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def request(self) -> SwapRequest:
        return self._state.request

    @property
    def errors(self) -> Mapping[SwapField, FieldError]:
        return self._state.errors

    @property
    def target_amount_text(self) -> str:
        return self._state.target_amount_text

    @property
    def is_submittable(self) -> bool:
        return self._state.is_submittable

    @property
    def ledger(self) -> BalanceLedger:
        return self._ledger

    # -------------------------------------------------------------------------
    # Редактирование
    # -------------------------------------------------------------------------

    def set_source_instrument(self, symbol: Optional[str]) -> FormState:
        return self._apply(self.request.model_copy(update={"source_symbol": symbol or ""}))

    def set_target_instrument(self, symbol: Optional[str]) -> FormState:
        return self._apply(self.request.model_copy(update={"target_symbol": symbol or ""}))

    def set_source_amount(self, text: str) -> bool:
        """
        Ввод суммы. Текст вне грамматики суммы отбрасывается.

        Returns:
            True если текст принят
        """
        if not is_amount_text(text):
            logger.debug("Rejected amount input %r", text)
            return False
        self._apply(self.request.model_copy(update={"source_amount_text": text}))
        return True

    def swap_direction(self) -> FormState:
        """Обмен source ↔ target; новая сумма = текущая вычисленная target сумма."""
        request = self.request
        return self._apply(
            SwapRequest(
                source_symbol=request.target_symbol,
                target_symbol=request.source_symbol,
                source_amount_text=self._state.target_amount_text,
            )
        )

    def use_max_balance(self) -> FormState:
        """
        Сумма = весь баланс source инструмента.

        Ошибка sourceAmount снимается сразу (оптимистично), подтверждение -
        следующий полный проход revalidate().
        """
        source = self._state.source_instrument
        if source is None:
            return self._state

        balance = self._ledger.balance_of(self.holder, source.symbol)
        request = self.request.model_copy(update={"source_amount_text": amount_to_text(balance)})
        errors = validate(request, self._catalog.snapshot, self._ledger, self.holder)
        errors.pop(SwapField.SOURCE_AMOUNT, None)
        self._state = derive_state(request, self._catalog.snapshot, self._ledger, self.holder, errors)
        return self._state

    def clear_amount(self) -> FormState:
        """Сброс суммы (и производной target суммы)."""
        return self._apply(self.request.model_copy(update={"source_amount_text": ""}))

    # -------------------------------------------------------------------------
    # Внешние обновления
    # -------------------------------------------------------------------------

    def update_ledger(self, ledger: BalanceLedger) -> FormState:
        """Новый снапшот балансов от wallet service."""
        self._ledger = ledger
        return self.revalidate()

    def revalidate(self) -> FormState:
        """Полный проход: пересчёт по текущим снапшотам каталога и балансов."""
        return self._apply(self.request)

    def _apply(self, request: SwapRequest) -> FormState:
        self._state = derive_state(request, self._catalog.snapshot, self._ledger, self.holder)
        return self._state
