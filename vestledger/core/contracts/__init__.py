"""
Record Contract Validation Module

Модуль для валидации записей, передаваемых во внешний durable store.
"""

from .validators import (
    EngineSnapshotValidator,
    LedgerTotalsValidator,
    PhaseRecordValidator,
    RecordValidator,
    ScheduleRecordValidator,
    SchemaLoader,
    validate_engine_snapshot,
    validate_ledger_totals,
    validate_phase_record,
    validate_schedule_record,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "RecordValidator",
    "PhaseRecordValidator",
    "ScheduleRecordValidator",
    "LedgerTotalsValidator",
    "EngineSnapshotValidator",
    # Functions
    "validate_phase_record",
    "validate_schedule_record",
    "validate_ledger_totals",
    "validate_engine_snapshot",
]
