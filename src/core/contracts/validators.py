"""
JSON Schema Contract Validators

Граница доверия на входе: всё, что приходит от недоверенного бидера
(trade payload), и всё, что фонд экспортирует наружу (fund_state),
сверяется с формальными JSON Schema контрактами.

Схемы (contracts/schema/ в корне репозитория):
- trade.json: бид контрагента
- fund_state.json: снапшот фонда до/после settlement и миграции
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Type

import jsonschema
from jsonschema import Draft202012Validator

from src.core.errors import FolioError, InvalidTrade, InvariantViolation


DEFAULT_SCHEMA_DIR = Path(__file__).resolve().parents[3] / "contracts" / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик и кэш JSON Schema контрактов.

    Каждая схема проходит meta-validation (Draft 2020-12) один раз при загрузке.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or DEFAULT_SCHEMA_DIR
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def available(self) -> List[str]:
        """Имена контрактов, лежащих в каталоге схем."""
        return sorted(path.stem for path in self._schema_dir.glob("*.json"))

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Args:
            schema_name: Имя контракта без расширения ('trade', 'fund_state')

        Raises:
            FileNotFoundError: Файла контракта нет
            ValueError: Схема не проходит meta-validation
        """
        cached = self._schemas.get(schema_name)
        if cached is not None:
            return cached

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.is_file():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e.message}") from e

        self._schemas[schema_name] = schema
        return schema


@lru_cache(maxsize=None)
def default_loader() -> SchemaLoader:
    """Общий загрузчик для контрактов репозитория (создаётся при первом обращении)."""
    return SchemaLoader()


@lru_cache(maxsize=None)
def _compiled(schema_name: str) -> Draft202012Validator:
    return Draft202012Validator(default_loader().load_schema(schema_name))


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


def format_error(error: jsonschema.ValidationError) -> str:
    """'/sell_amount: 0 is less than the minimum of 1'; корень payload — '/'."""
    path = "/" + "/".join(str(part) for part in error.absolute_path)
    return f"{path}: {error.message}"


class ContractValidator:
    """
    Валидатор одного контракта.

    validate() пробрасывает jsonschema.ValidationError как есть;
    check() превращает нарушения контракта в доменную ошибку error_cls
    с перечнем всех нарушений.
    """

    schema_name: str = ""
    error_cls: Type[FolioError] = FolioError

    def __init__(self, schema_name: str | None = None):
        if schema_name is not None:
            self.schema_name = schema_name
        self.validator = _compiled(self.schema_name)

    @property
    def schema(self) -> Dict[str, Any]:
        return self.validator.schema

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Первое найденное нарушение
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[jsonschema.ValidationError]:
        return self.validator.iter_errors(data)

    def describe_errors(self, data: Dict[str, Any]) -> List[str]:
        """Все нарушения в стабильном порядке (по пути в payload)."""
        errors = sorted(self.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
        return [format_error(error) for error in errors]

    def check(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns:
            data без изменений, если контракт соблюдён

        Raises:
            error_cls: Со списком всех нарушений
        """
        problems = self.describe_errors(data)
        if problems:
            raise self.error_cls(f"{self.schema_name} contract violated: " + "; ".join(problems))
        return data


class TradeValidator(ContractValidator):
    """Контракт входящего бида."""

    schema_name = "trade"
    error_cls = InvalidTrade


class FundStateValidator(ContractValidator):
    """Контракт экспортируемого состояния фонда."""

    schema_name = "fund_state"
    error_cls = InvariantViolation


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_trade(data: Dict[str, Any]) -> None:
    """
    Raises:
        jsonschema.ValidationError: payload не соответствует trade.json
    """
    TradeValidator().validate(data)


def validate_fund_state(data: Dict[str, Any]) -> None:
    """
    Raises:
        jsonschema.ValidationError: данные не соответствуют fund_state.json
    """
    FundStateValidator().validate(data)


def check_trade(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Raises:
        InvalidTrade: Со списком всех нарушений trade.json
    """
    return TradeValidator().check(data)
