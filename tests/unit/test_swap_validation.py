"""Тесты для validate() и грамматики суммы.

Coverage:
- Обязательность source/target, self-swap, недоступный символ
- Обязательность и формат суммы
- Достаточность баланса (включая нулевой и неизвестный)
- Отсутствие "стекинга" ошибок для нечислового текста
- Независимость правил (ошибки на нескольких полях одновременно)
"""

import pytest

from src.core.domain import SwapField, SwapRequest
from src.swap.validation import (
    MSG_AMOUNT_INVALID,
    MSG_AMOUNT_NOT_POSITIVE,
    MSG_AMOUNT_REQUIRED,
    MSG_SAME_TOKEN,
    MSG_SOURCE_REQUIRED,
    MSG_TARGET_REQUIRED,
    amount_to_text,
    is_amount_text,
    parse_amount,
    validate,
)
from tests.conftest import HOLDER


def run(catalog, ledger, **fields):
    return validate(SwapRequest(**fields), catalog.snapshot, ledger, HOLDER)


class TestAmountGrammar:
    """Грамматика и парсинг суммы."""

    @pytest.mark.parametrize("text", ["", "1", "12.5", ".5", "1.", ".", "007"])
    def test_accepted(self, text):
        assert is_amount_text(text)

    @pytest.mark.parametrize("text", ["-1", "1.2.3", "1e5", "abc", " 1", "1,5", "١٢"])
    def test_rejected(self, text):
        assert not is_amount_text(text)

    def test_parse(self):
        assert parse_amount("12.5") == 12.5
        assert parse_amount("1.") == 1.0
        assert parse_amount(".5") == 0.5
        assert parse_amount("") is None
        assert parse_amount(".") is None
        assert parse_amount("abc") is None

    def test_amount_to_text_has_no_exponent(self):
        assert amount_to_text(566.6) == "566.6"
        assert amount_to_text(1000.0) == "1000"
        assert amount_to_text(1e-7) == "0.0000001"
        assert amount_to_text(0) == "0"
        assert is_amount_text(amount_to_text(1e21))


class TestInstrumentRules:
    """Правила sourceInstrument / targetInstrument."""

    def test_valid_request_has_no_errors(self, catalog, ledger):
        assert run(catalog, ledger, source_symbol="USD", target_symbol="ETH", source_amount_text="100") == {}

    def test_source_required(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="", target_symbol="ETH", source_amount_text="1")
        assert errors[SwapField.SOURCE_INSTRUMENT].message == MSG_SOURCE_REQUIRED

    def test_target_required(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="USD", target_symbol="", source_amount_text="1")
        assert errors[SwapField.TARGET_INSTRUMENT].message == MSG_TARGET_REQUIRED

    @pytest.mark.parametrize("amount", ["", "1", "600", "."])
    def test_self_swap_forbidden_regardless_of_amount(self, catalog, ledger, amount):
        errors = run(catalog, ledger, source_symbol="ATOM", target_symbol="ATOM", source_amount_text=amount)
        assert errors[SwapField.TARGET_INSTRUMENT].message == MSG_SAME_TOKEN

    def test_unknown_symbol_reported(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="DOGE", target_symbol="LUNA", source_amount_text="1")
        assert errors[SwapField.SOURCE_INSTRUMENT].message == "Token DOGE is not available"
        assert errors[SwapField.TARGET_INSTRUMENT].message == "Token LUNA is not available"


class TestAmountRules:
    """Правила sourceAmount."""

    def test_amount_required(self, catalog, ledger):
        errors = run(catalog, ledger, source_amount_text="")
        assert errors[SwapField.SOURCE_AMOUNT].message == MSG_AMOUNT_REQUIRED

    def test_lone_point_is_invalid_not_insufficient(self, catalog, ledger):
        """Нечисловой текст: только ошибка формата, без ошибки баланса."""
        errors = run(catalog, ledger, source_symbol="ETH", source_amount_text=".", target_symbol="USD")
        assert errors[SwapField.SOURCE_AMOUNT].message == MSG_AMOUNT_INVALID

    def test_zero_amount(self, catalog, ledger):
        errors = run(catalog, ledger, source_amount_text="0.0")
        assert errors[SwapField.SOURCE_AMOUNT].message == MSG_AMOUNT_NOT_POSITIVE

    def test_insufficient_balance_mentions_balance_and_symbol(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="ATOM", target_symbol="ETH", source_amount_text="600")
        message = errors[SwapField.SOURCE_AMOUNT].message
        assert message == "Insufficient balance. You have 566.6 ATOM"

    def test_exact_balance_is_sufficient(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="ATOM", target_symbol="ETH", source_amount_text="566.6")
        assert SwapField.SOURCE_AMOUNT not in errors

    def test_zero_balance_is_insufficient(self, catalog, ledger):
        """Неизвестный баланс = 0 → insufficient для любой суммы."""
        errors = run(catalog, ledger, source_symbol="ETH", target_symbol="USD", source_amount_text="0.001")
        assert errors[SwapField.SOURCE_AMOUNT].message == "Insufficient balance. You have 0 ETH"

    def test_balance_uses_thousands_separator(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="USD", target_symbol="ETH", source_amount_text="1000.5")
        assert errors[SwapField.SOURCE_AMOUNT].message == "Insufficient balance. You have 1,000 USD"

    def test_sufficiency_skipped_without_source(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="", target_symbol="ETH", source_amount_text="999999")
        assert SwapField.SOURCE_AMOUNT not in errors


class TestIndependence:
    """Правила независимы и пересчитываются с нуля."""

    def test_errors_on_all_fields(self, catalog, ledger):
        errors = run(catalog, ledger, source_symbol="", target_symbol="", source_amount_text="")
        assert set(errors) == {
            SwapField.SOURCE_INSTRUMENT,
            SwapField.TARGET_INSTRUMENT,
            SwapField.SOURCE_AMOUNT,
        }

    def test_no_memory_of_previous_errors(self, catalog, ledger):
        run(catalog, ledger, source_symbol="ATOM", target_symbol="ATOM", source_amount_text="600")
        assert run(catalog, ledger, source_symbol="ATOM", target_symbol="ETH", source_amount_text="1") == {}

    def test_error_carries_its_field(self, catalog, ledger):
        errors = run(catalog, ledger, source_amount_text="")
        for field, error in errors.items():
            assert error.field == field
