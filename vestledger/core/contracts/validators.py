"""
JSON Schema Record Validators

Модуль для валидации записей, которые движок передаёт внешнему
durable store и получает обратно при восстановлении.
Использует библиотеку jsonschema для проверки соответствия данных схемам.

Схемы:
- phase_record.json
- schedule_record.json
- ledger_totals.json
- engine_snapshot.json (конверт; элементы проверяются своими схемами)
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются вместе с пакетом в schema/ рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'phase_record')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема сама по себе невалидна
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# RECORD VALIDATORS
# =============================================================================


class RecordValidator:
    """
    Базовый класс для валидаторов записей.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class PhaseRecordValidator(RecordValidator):
    def __init__(self):
        super().__init__("phase_record")


class ScheduleRecordValidator(RecordValidator):
    def __init__(self):
        super().__init__("schedule_record")


class LedgerTotalsValidator(RecordValidator):
    def __init__(self):
        super().__init__("ledger_totals")


class EngineSnapshotValidator(RecordValidator):
    """
    Валидатор конверта снапшота.

    validate() проверяет конверт и затем каждую запись её собственной схемой.
    """

    def __init__(self):
        super().__init__("engine_snapshot")
        self._phase = PhaseRecordValidator()
        self._schedule = ScheduleRecordValidator()
        self._ledger = LedgerTotalsValidator()

    def validate(self, data: Dict[str, Any]) -> None:
        self.validator.validate(data)
        for phase in data["phases"]:
            self._phase.validate(phase)
        for schedule in data["schedules"]:
            self._schedule.validate(schedule)
        self._ledger.validate(data["ledger"])

    def is_valid(self, data: Dict[str, Any]) -> bool:
        try:
            self.validate(data)
        except jsonschema.ValidationError:
            return False
        return True


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_phase_record(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PhaseRecordValidator().validate(data)


def validate_schedule_record(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    ScheduleRecordValidator().validate(data)


def validate_ledger_totals(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    LedgerTotalsValidator().validate(data)


def validate_engine_snapshot(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если конверт или любая запись не соответствуют схеме
    """
    EngineSnapshotValidator().validate(data)
