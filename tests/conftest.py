"""Общие fixtures: price feed, каталог, ledger, контроллер формы."""

import pytest

from src.catalog import PriceCatalog
from src.core.domain import HolderBalance
from src.ledger import BalanceLedger
from src.swap import SwapFormController

HOLDER = "wallet-1"


@pytest.fixture
def raw_feed():
    """Сырой feed: дубликаты по символу, нулевая цена, неотсортированный порядок."""
    return [
        {"currency": "ETH", "date": "2023-08-29T07:10:40.000Z", "price": 1645.93},
        {"currency": "USD", "date": "2023-08-29T07:10:30.000Z", "price": 1},
        {"currency": "ETH", "date": "2023-08-29T07:10:52.000Z", "price": 2000},
        {"currency": "ATOM", "date": "2023-08-29T07:10:50.000Z", "price": 7.186},
        {"currency": "BLUR", "date": "2023-08-29T07:10:20.000Z", "price": 0.208},
        {"currency": "LUNA", "date": "2023-08-29T07:10:40.000Z", "price": 0},
    ]


@pytest.fixture
def catalog(raw_feed):
    catalog = PriceCatalog()
    catalog.ingest(raw_feed)
    return catalog


@pytest.fixture
def ledger():
    return BalanceLedger(
        {
            HOLDER: [
                HolderBalance(instrument_symbol="USD", amount=1000),
                HolderBalance(instrument_symbol="ATOM", amount=566.6),
            ]
        }
    )


@pytest.fixture
def controller(catalog, ledger):
    return SwapFormController(catalog, ledger, HOLDER)
