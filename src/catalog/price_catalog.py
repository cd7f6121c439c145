"""PriceCatalog - одна актуальная цена на инструмент из сырого price feed.

Алгоритм ingest:
- группировка котировок по символу
- в группе побеждает котировка с максимальным observed_at
  (при равенстве - более поздняя во входном порядке)
- группы, где у победившей котировки цены нет или она <= 0, отбрасываются
- остаток → Instrument с детерминированным icon_ref, сортировка по символу
  без учёта регистра

Ошибка фида (недоступен / malformed структура) → FeedError, предыдущий
снапшот каталога сохраняется без частичной перезаписи. Запись без цены
malformed не считается.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from src.core.contracts import PriceFeedValidator
from src.core.domain.instrument import Instrument, PriceQuote

logger = logging.getLogger(__name__)

TOKEN_ICON_BASE_URL = "https://raw.githubusercontent.com/Switcheo/token-icons/main/tokens"

FeedRecord = Union[PriceQuote, Mapping[str, Any]]
FeedFetcher = Callable[[], Awaitable[Iterable[Mapping[str, Any]]]]


class FeedError(Exception):
    """
    Price feed недоступен или вернул malformed данные.

    Предыдущий снапшот каталога сохраняется; вызывающий показывает retry.
    """
    pass


@dataclass(frozen=True)
class CatalogConfig:
    """Конфигурация каталога: откуда presentation слой берёт иконки."""
    icon_base_url: str = TOKEN_ICON_BASE_URL
    icon_extension: str = "svg"

    def icon_ref(self, symbol: str) -> str:
        return f"{self.icon_base_url}/{symbol}.{self.icon_extension}"


def symbol_sort_key(instrument: Instrument) -> Tuple[str, str]:
    """
    Ключ сортировки инструментов по символу.

    Сначала без учёта регистра (ampLUNA < ATOM < bNEO < BUSD), при равенстве
    строчный вариант раньше заглавного.
    """
    return (instrument.symbol.casefold(), instrument.symbol.swapcase())


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable снапшот каталога. Один lookup читает ровно один снапшот."""

    instruments: Tuple[Instrument, ...] = ()
    _by_symbol: Dict[str, Instrument] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_instruments(cls, instruments: Iterable[Instrument]) -> "CatalogSnapshot":
        ordered = tuple(sorted(instruments, key=symbol_sort_key))
        return cls(instruments=ordered, _by_symbol={i.symbol: i for i in ordered})

    def lookup(self, symbol: Optional[str]) -> Optional[Instrument]:
        if not symbol:
            return None
        return self._by_symbol.get(symbol)

    def search(self, query: str) -> Tuple[Instrument, ...]:
        """Регистронезависимый поиск подстроки в символе, порядок сохраняется."""
        needle = query.strip().lower()
        if not needle:
            return self.instruments
        return tuple(i for i in self.instruments if needle in i.symbol.lower())

    def __len__(self) -> int:
        return len(self.instruments)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._by_symbol


def reduce_quotes(
    quotes: Iterable[PriceQuote],
    config: Optional[CatalogConfig] = None,
) -> Tuple[Instrument, ...]:
    """Сведение котировок к одной цене на символ (см. docstring модуля)."""
    config = config or CatalogConfig()

    latest: Dict[str, PriceQuote] = {}
    for quote in quotes:
        current = latest.get(quote.instrument_symbol)
        # >= : при равном observed_at побеждает более поздняя запись
        if current is None or quote.observed_at >= current.observed_at:
            latest[quote.instrument_symbol] = quote

    instruments = []
    for symbol, quote in latest.items():
        if quote.price is None or quote.price <= 0:
            logger.debug("Dropping %s: latest price %s is not positive", symbol, quote.price)
            continue
        instruments.append(
            Instrument(symbol=symbol, price=quote.price, icon_ref=config.icon_ref(symbol))
        )

    return tuple(sorted(instruments, key=symbol_sort_key))


class PriceCatalog:
    """Каталог инструментов, обновляемый из price feed.

    Read-only для ядра: обновляется только внешним коллаборатором через
    ingest/refresh. Снапшот заменяется атомарно после полного успеха.
    """

    def __init__(self, config: Optional[CatalogConfig] = None):
        self.config = config or CatalogConfig()
        self._snapshot = CatalogSnapshot()

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def instruments(self) -> Tuple[Instrument, ...]:
        return self._snapshot.instruments

    def lookup(self, symbol: Optional[str]) -> Optional[Instrument]:
        return self._snapshot.lookup(symbol)

    def search(self, query: str) -> Tuple[Instrument, ...]:
        return self._snapshot.search(query)

    def ingest(self, records: Iterable[FeedRecord]) -> Tuple[Instrument, ...]:
        """Замена содержимого каталога по новому набору котировок.

        Args:
            records: PriceQuote или сырые записи фида {currency, date, price}

        Returns:
            Инструменты, отсортированные по символу

        Raises:
            FeedError: malformed данные (каталог не изменяется)
        """
        try:
            records = list(records)
        except TypeError as exc:
            raise self._rejected(str(exc)) from exc

        raw = [r for r in records if not isinstance(r, PriceQuote)]
        violations = PriceFeedValidator().violations(raw)
        if violations:
            raise self._rejected("; ".join(violations))

        try:
            quotes = [
                r if isinstance(r, PriceQuote) else PriceQuote.model_validate(r)
                for r in records
            ]
        except ValidationError as exc:
            raise self._rejected(str(exc)) from exc

        instruments = reduce_quotes(quotes, self.config)
        self._snapshot = CatalogSnapshot.from_instruments(instruments)
        logger.info("Price catalog updated: %d quotes -> %d instruments", len(quotes), len(instruments))
        return instruments

    async def refresh(self, fetch: FeedFetcher) -> Tuple[Instrument, ...]:
        """Загрузка фида через внешний fetcher и ingest.

        Raises:
            FeedError: fetcher упал или вернул malformed данные
        """
        try:
            records = await fetch()
        except FeedError:
            raise
        except Exception as exc:
            logger.warning("Price feed unreachable: %s", exc)
            raise FeedError(f"Price feed unreachable: {exc}") from exc

        return self.ingest(records)

    def _rejected(self, reason: str) -> FeedError:
        logger.warning("Price feed rejected, keeping %d instruments: %s", len(self._snapshot), reason)
        return FeedError(f"Malformed price feed: {reason}")
