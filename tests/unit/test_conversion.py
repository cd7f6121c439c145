"""
Тесты для модуля Conversion

Проверяет:
1. Курс обмена и деградацию к 0 при отсутствии инструмента
2. Конверсию сумм (в т.ч. обратимость)
3. Форматирование для отображения (0, малые значения, хвостовые нули)
4. Форматирование баланса
"""

import pytest

from src.core.domain import Instrument
from src.core.math import (
    convert,
    exchange_rate,
    format_balance,
    format_display,
    is_close,
)


def make_instrument(symbol: str, price: float) -> Instrument:
    return Instrument(symbol=symbol, price=price, icon_ref=f"icons/{symbol}.svg")


@pytest.fixture
def usd() -> Instrument:
    return make_instrument("USD", 1.0)


@pytest.fixture
def eth() -> Instrument:
    return make_instrument("ETH", 2000.0)


@pytest.fixture
def atom() -> Instrument:
    return make_instrument("ATOM", 7.186)


# =============================================================================
# EXCHANGE RATE
# =============================================================================


class TestExchangeRate:
    """Тесты для exchange_rate"""

    def test_rate_is_price_ratio(self, usd, eth) -> None:
        """Курс = source.price / target.price"""
        assert exchange_rate(usd, eth) == pytest.approx(0.0005)
        assert exchange_rate(eth, usd) == pytest.approx(2000.0)

    def test_missing_instrument_gives_zero(self, usd) -> None:
        """Отсутствующий инструмент → 0 (не ошибка)"""
        assert exchange_rate(None, usd) == 0.0
        assert exchange_rate(usd, None) == 0.0
        assert exchange_rate(None, None) == 0.0

    def test_same_instrument_rate_is_one(self, atom) -> None:
        assert exchange_rate(atom, atom) == 1.0

    def test_tiny_target_price_is_not_zeroed(self) -> None:
        """Положительная цена ниже любого epsilon всё равно делится"""
        dust = make_instrument("DUST", 1e-19)
        assert exchange_rate(make_instrument("USD", 1.0), dust) == pytest.approx(1e19)
        assert convert(2.0, make_instrument("USD", 1.0), dust) == pytest.approx(2e19)

    @pytest.mark.parametrize(
        "price_a,price_b",
        [(1.0, 2000.0), (7.186, 0.208), (1e-6, 30000.0), (123.456, 123.456), (1.0, 1e-19)],
    )
    def test_rate_reciprocal(self, price_a, price_b) -> None:
        """exchange_rate(A, B) == 1 / exchange_rate(B, A)"""
        a = make_instrument("A", price_a)
        b = make_instrument("B", price_b)
        assert is_close(exchange_rate(a, b), 1.0 / exchange_rate(b, a))


# =============================================================================
# CONVERT
# =============================================================================


class TestConvert:
    """Тесты для convert"""

    def test_usd_to_eth(self, usd, eth) -> None:
        """1000 USD при ETH=2000 → 0.5 ETH"""
        assert convert(1000.0, usd, eth) == pytest.approx(0.5)

    def test_missing_instrument_converts_to_zero(self, usd) -> None:
        assert convert(1000.0, usd, None) == 0.0

    @pytest.mark.parametrize("amount", [0.0001, 1.0, 566.6, 1e9])
    def test_round_trip(self, atom, eth, amount) -> None:
        """convert(convert(x, A, B), B, A) ≈ x"""
        there = convert(amount, atom, eth)
        back = convert(there, eth, atom)
        assert is_close(back, amount)


# =============================================================================
# FORMAT DISPLAY
# =============================================================================


class TestFormatDisplay:
    """Тесты для format_display"""

    def test_zero(self) -> None:
        assert format_display(0) == "0"
        assert format_display(0.0) == "0"
        assert format_display(-0.0) == "0"

    def test_small_value_uses_eight_decimals(self) -> None:
        """Малые значения не отображаются как "0" """
        assert format_display(0.00000001) == "0.00000001"
        assert format_display(0.005) == "0.00500000"
        assert format_display(0.0000000001) == "0.00000000"

    def test_trailing_zeros_stripped(self) -> None:
        assert format_display(1.5) == "1.5"
        assert format_display(2.000000) == "2"
        assert format_display(0.5) == "0.5"
        assert format_display(100) == "100"

    def test_rounded_to_max_decimals(self) -> None:
        assert format_display(1.23456789) == "1.234568"
        assert format_display(1.23456789, max_decimals=2) == "1.23"
        assert format_display(0.0139182) == "0.013918"

    def test_zero_max_decimals_keeps_integer_digits(self) -> None:
        """Нули целой части не удаляются"""
        assert format_display(100.4, max_decimals=0) == "100"
        assert format_display(2500.0, max_decimals=0) == "2500"

    def test_threshold_boundary(self) -> None:
        """0.01 уже не "малое" значение"""
        assert format_display(0.01) == "0.01"

    def test_non_finite_displayed_as_zero(self) -> None:
        assert format_display(float("nan")) == "0"
        assert format_display(float("inf")) == "0"

    def test_large_value(self) -> None:
        assert format_display(1e22) == "10000000000000000000000"

    def test_negative_max_decimals_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_decimals must be non-negative"):
            format_display(1.0, max_decimals=-1)


# =============================================================================
# FORMAT BALANCE
# =============================================================================


class TestFormatBalance:
    """Тесты для format_balance"""

    def test_fractional_balance(self) -> None:
        assert format_balance(566.6) == "566.6"

    def test_thousands_separator(self) -> None:
        assert format_balance(1000) == "1,000"
        assert format_balance(1234567.891) == "1,234,567.891"

    def test_at_most_three_decimals(self) -> None:
        assert format_balance(0.12345) == "0.123"

    def test_zero(self) -> None:
        assert format_balance(0) == "0"
        assert format_balance(0.0001) == "0"
