"""
JSON Schema Contract Validators

Модуль для валидации внешних данных согласно формальным JSON Schema контрактам.
Использует библиотеку jsonschema для проверки соответствия данных схемам.

Схемы:
- price_feed.json (сырые котировки {currency, date, price})
- balance_sheet.json (балансы держателя {symbol, amount})
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Автоматически находит схемы в contracts/schema/ относительно корня проекта.
    """

    def __init__(self):
        # Корень проекта: 4 уровня вверх от этого файла
        self._schema_dir = Path(__file__).parent.parent.parent.parent / "contracts" / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'price_feed')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation самой схемы
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Валидация данных против схемы.

        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def violations(self, data: Any) -> List[str]:
        """
        Все нарушения контракта, по одному на строку.

        Returns:
            Сообщения вида "<путь>: <описание>" ([] если данные валидны)
        """
        return [
            f"{error.json_path}: {error.message}"
            for error in self.validator.iter_errors(data)
        ]


class PriceFeedValidator(ContractValidator):
    """Валидатор для price_feed контракта."""

    def __init__(self):
        super().__init__("price_feed")


class BalanceSheetValidator(ContractValidator):
    """Валидатор для balance_sheet контракта."""

    def __init__(self):
        super().__init__("balance_sheet")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_balance_sheet(data: List[Dict[str, Any]]) -> None:
    """
    Валидация списка балансов держателя.

    Raises:
        jsonschema.ValidationError: Если данные не соответствуют схеме
    """
    BalanceSheetValidator().validate(data)
