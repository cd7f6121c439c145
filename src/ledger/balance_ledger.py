"""BalanceLedger - доступные балансы держателей по инструментам.

Контракт balance_of(holder, symbol) -> float >= 0:
неизвестный holder или symbol → 0.0, никогда не ошибка. Валидация формы
опирается на это, чтобы единообразно выдавать "insufficient balance".
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

from src.core.contracts import validate_balance_sheet
from src.core.domain.instrument import HolderBalance


class BalanceLedger:
    """Immutable снапшот балансов. Обновление - новый экземпляр (with_balances)."""

    def __init__(self, balances: Optional[Mapping[str, Iterable[HolderBalance]]] = None):
        """
        Args:
            balances: holder → записи HolderBalance (не более одной на символ)

        Raises:
            ValueError: если у держателя две записи по одному символу
        """
        ledger: Dict[str, Mapping[str, float]] = {}
        for holder, entries in (balances or {}).items():
            per_symbol: Dict[str, float] = {}
            for entry in entries:
                if entry.instrument_symbol in per_symbol:
                    raise ValueError(
                        f"Duplicate balance entry for holder {holder!r}, symbol {entry.instrument_symbol!r}"
                    )
                per_symbol[entry.instrument_symbol] = entry.amount
            ledger[holder] = MappingProxyType(per_symbol)
        self._balances: Mapping[str, Mapping[str, float]] = MappingProxyType(ledger)

    @classmethod
    def from_records(cls, holder: str, records: Iterable[Mapping[str, Any]]) -> "BalanceLedger":
        """Ledger одного держателя из сырых записей [{symbol, amount}].

        Raises:
            jsonschema.ValidationError: записи не соответствуют balance_sheet
        """
        records = list(records)
        validate_balance_sheet(records)
        return cls({holder: [HolderBalance.model_validate(r) for r in records]})

    def balance_of(self, holder: str, symbol: Optional[str]) -> float:
        if not symbol:
            return 0.0
        return self._balances.get(holder, {}).get(symbol, 0.0)

    def holders(self) -> tuple:
        return tuple(self._balances)

    def with_balances(self, holder: str, entries: Iterable[HolderBalance]) -> "BalanceLedger":
        """Новый ledger, в котором балансы holder заменены на entries."""
        merged: Dict[str, Iterable[HolderBalance]] = {
            h: [HolderBalance(instrument_symbol=s, amount=a) for s, a in per_symbol.items()]
            for h, per_symbol in self._balances.items()
            if h != holder
        }
        merged[holder] = list(entries)
        return BalanceLedger(merged)
