"""Accounting — реестр фаз, хранилище расписаний, учёт пула и выплаты.

Порядок зависимостей (от листьев):
- PhaseRegistry: immutable фазы по phase_id
- ScheduleStore: расписания получателей, append-only кроме released
- LedgerAccountant: агрегаты пула и глобальные инварианты
- ReleaseExecutor: валидация и атомарная выплата
"""

from .ledger_accountant import LedgerAccountant, audit_totals
from .phase_registry import PhaseRegistry
from .release_executor import ReleaseExecutor, ReleaseReceipt
from .schedule_store import ScheduleStore, derive_schedule_id

__all__ = [
    "PhaseRegistry",
    "ScheduleStore",
    "derive_schedule_id",
    "LedgerAccountant",
    "audit_totals",
    "ReleaseExecutor",
    "ReleaseReceipt",
]
