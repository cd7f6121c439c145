"""Catalog - каталог инструментов, сведённый из сырого price feed.

- Одна актуальная цена на символ (последняя по времени, цена > 0)
- Детерминированный порядок по символу
- FeedError без частичной перезаписи
"""

from .price_catalog import (
    CatalogConfig,
    CatalogSnapshot,
    FeedError,
    PriceCatalog,
    reduce_quotes,
)

__all__ = [
    "PriceCatalog",
    "CatalogSnapshot",
    "CatalogConfig",
    "FeedError",
    "reduce_quotes",
]
