"""VestingEngine — внешний интерфейс движка vesting-учёта.

Связывает PhaseRegistry, ScheduleStore, LedgerAccountant и ReleaseExecutor
и сериализует все мутации (single writer):
- create_phase, add_schedule, release, release_all, fund_pool, withdraw
выполняются под одним RLock в полном порядке.

Чтения берут тот же RLock. Мутация обновляет расписания и LedgerTotals
двумя заменами ссылок; под lock читатель видит состояние только до или
после мутации целиком, никогда между заменами.

Время (now) всегда передаётся вызывающим. Движок не выполняет I/O:
snapshot()/restore() только формируют и принимают записи для внешнего
durable store.
"""

import logging
from threading import RLock
from typing import Any, Dict

from pydantic import ValidationError

from vestledger.accounting.ledger_accountant import LedgerAccountant
from vestledger.accounting.phase_registry import PhaseRegistry
from vestledger.accounting.release_executor import ReleaseExecutor, ReleaseReceipt
from vestledger.accounting.schedule_store import ScheduleStore
from vestledger.config import EngineConfig
from vestledger.core.contracts import validate_engine_snapshot
from vestledger.core.domain.ledger_totals import LedgerTotals
from vestledger.core.domain.phase import Phase
from vestledger.core.domain.schedule import Schedule, ScheduleStatus
from vestledger.core.errors import InvalidPhase, InvalidSchedule, LedgerInvariantViolation
from vestledger.core.math.release_calculator import (
    UnlockEvent,
    VestingBreakdown,
    next_unlock_time,
    unlock_timeline,
)

logger = logging.getLogger(__name__)

# Версия формата записей для durable store (см. schema/engine_snapshot.json)
SNAPSHOT_SCHEMA_VERSION = "1"


class VestingEngine:
    """Движок vesting-учёта: фазы, расписания, пул, выплаты."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        totals: LedgerTotals | None = None,
        phases: list[Phase] | None = None,
        schedules: list[Schedule] | None = None,
    ):
        """
        Args:
            config: конфигурация движка (опционально, используется default)
            totals: инъецируемое состояние пула (по умолчанию пустой пул)
            phases: ранее сохранённые фазы
            schedules: ранее сохранённые расписания в порядке создания

        Raises:
            LedgerInvariantViolation: если totals не согласованы с расписаниями
        """
        self.config = config or EngineConfig()
        max_amount = self.config.max_amount

        self._lock = RLock()
        self.registry = PhaseRegistry(phases)
        self.store = ScheduleStore(self.registry, schedules, max_amount)
        self.ledger = LedgerAccountant(totals, max_amount)
        self.executor = ReleaseExecutor(self.registry, self.store, self.ledger, max_amount)

        if schedules or totals is not None:
            self.check_invariants()

    # =========================================================================
    # PHASES
    # =========================================================================

    def create_phase(
        self,
        phase_id: int,
        start: int,
        vest_duration: int,
        cliff_duration: int,
        cliff_percent_tenths: int,
        slice_seconds: int,
        name: str = "",
    ) -> bool:
        """Создание фазы; существующий phase_id — пропуск (False)."""
        with self._lock:
            return self.registry.create_phase(
                phase_id,
                start,
                vest_duration,
                cliff_duration,
                cliff_percent_tenths,
                slice_seconds,
                name,
            )

    def phase_exists(self, phase_id: int) -> bool:
        with self._lock:
            return self.registry.phase_exists(phase_id)

    def get_phase(self, phase_id: int) -> Phase:
        with self._lock:
            return self.registry.get_phase(phase_id)

    def list_phases(self) -> list[Phase]:
        with self._lock:
            return self.registry.list_phases()

    # =========================================================================
    # SCHEDULES
    # =========================================================================

    def add_schedule(
        self,
        recipient: str,
        total_amount: int,
        cliff_percent_tenths: int,
        phase_id: int,
    ) -> str:
        """Добавление расписания и резервирование total_amount в committed.

        Returns:
            schedule_id

        Raises:
            InvalidSchedule, PhaseNotFound, DuplicateSchedule, ArithmeticOverflow
        """
        with self._lock:
            schedule = self.store.prepare_schedule(
                recipient, total_amount, cliff_percent_tenths, phase_id
            )
            new_totals = self.ledger.preview_reserve(schedule.total_amount)
            self.store.insert(schedule)
            self.ledger.commit(new_totals)
            self._audit()
            return schedule.schedule_id

    def schedule_exists(self, recipient: str, phase_id: int) -> bool:
        with self._lock:
            return self.store.schedule_exists(recipient, phase_id)

    def get_schedule(self, schedule_id: str) -> Schedule:
        with self._lock:
            return self.store.get_schedule(schedule_id)

    def list_schedules(self, recipient: str) -> list[Schedule]:
        with self._lock:
            return self.store.list_schedules(recipient)

    def schedule_count(self, recipient: str) -> int:
        with self._lock:
            return self.store.schedule_count(recipient)

    def schedule_at(self, recipient: str, index: int) -> Schedule:
        with self._lock:
            return self.store.schedule_at(recipient, index)

    def schedule_id_at(self, recipient: str, index: int) -> str:
        with self._lock:
            return self.store.schedule_id_at(recipient, index)

    def status(self, schedule_id: str) -> ScheduleStatus:
        with self._lock:
            return self.store.get_schedule(schedule_id).status

    # =========================================================================
    # QUERIES (pure)
    # =========================================================================

    def breakdown(self, schedule_id: str, now: float) -> VestingBreakdown:
        with self._lock:
            return self.executor.breakdown(schedule_id, now)

    def releasable(self, schedule_id: str, now: float) -> int:
        """Доступно к выплате на момент now."""
        with self._lock:
            return self.executor.releasable(schedule_id, now)

    def vested(self, schedule_id: str, now: float) -> int:
        """Разблокировано на момент now (включая уже выплаченное)."""
        with self._lock:
            return self.executor.breakdown(schedule_id, now).vested

    def next_unlock(self, schedule_id: str, now: float) -> int | None:
        with self._lock:
            schedule = self.store.get_schedule(schedule_id)
            phase = self.registry.get_phase(schedule.phase_id)
        return next_unlock_time(phase, schedule, now, self.config.max_amount)

    def unlock_timeline(self, schedule_id: str) -> list[UnlockEvent]:
        with self._lock:
            schedule = self.store.get_schedule(schedule_id)
            phase = self.registry.get_phase(schedule.phase_id)
        return unlock_timeline(phase, schedule, self.config.max_amount)

    # =========================================================================
    # RELEASES
    # =========================================================================

    def release(self, schedule_id: str, amount: int, now: float) -> ReleaseReceipt:
        with self._lock:
            receipt = self.executor.release(schedule_id, amount, now)
            self._audit()
            return receipt

    def release_all(self, recipient: str, now: float) -> list[ReleaseReceipt]:
        with self._lock:
            receipts = self.executor.release_all(recipient, now)
            self._audit()
            return receipts

    # =========================================================================
    # POOL
    # =========================================================================

    def fund_pool(self, amount: int) -> LedgerTotals:
        with self._lock:
            totals = self.ledger.fund_pool(amount)
            self._audit()
            return totals

    def withdraw(self, amount: int) -> LedgerTotals:
        """Вывод средств пула, не покрывающих обязательства перед получателями."""
        with self._lock:
            totals = self.ledger.withdraw(amount)
            self._audit()
            return totals

    def withdrawable(self) -> int:
        with self._lock:
            return self.ledger.withdrawable()

    def totals(self) -> LedgerTotals:
        with self._lock:
            return self.ledger.totals()

    # =========================================================================
    # INVARIANTS
    # =========================================================================

    def _audit(self) -> None:
        if self.config.audit_after_mutation:
            self.ledger.check_invariants()

    def check_invariants(self) -> None:
        """Полный аудит: инварианты ledger и сверка с расписаниями.

        Выполняется под lock, поэтому не пересекается с мутацией.

        Raises:
            LedgerInvariantViolation: при любом расхождении
        """
        with self._lock:
            self.ledger.check_invariants()
            totals = self.ledger.totals()
            schedules = self.store.all_schedules()

        committed = sum(s.total_amount for s in schedules)
        released = sum(s.released for s in schedules)

        if committed != totals.committed:
            raise LedgerInvariantViolation(
                f"committed {totals.committed} != sum of schedule totals {committed}"
            )
        if released != totals.released_total:
            raise LedgerInvariantViolation(
                f"released_total {totals.released_total} != sum of schedule releases {released}"
            )

    # =========================================================================
    # DURABLE STORE RECORDS
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        """Все записи движка для внешнего durable store.

        Берёт lock, чтобы фазы, расписания и totals были согласованы.
        """
        with self._lock:
            data = {
                "schema_version": SNAPSHOT_SCHEMA_VERSION,
                "phases": [p.model_dump() for p in self.registry.list_phases()],
                "schedules": [s.model_dump() for s in self.store.all_schedules()],
                "ledger": self.ledger.totals().model_dump(),
            }
        validate_engine_snapshot(data)
        return data

    @classmethod
    def restore(
        cls,
        data: Dict[str, Any],
        config: EngineConfig | None = None,
    ) -> "VestingEngine":
        """Восстановление движка из записей durable store.

        Записи, прошедшие JSON Schema, повторно проверяются моделями
        (released ≤ total_amount, кратность slice, strict int).

        Raises:
            jsonschema.ValidationError: записи не соответствуют схемам
            InvalidPhase: запись фазы отвергнута моделью Phase
            InvalidSchedule: запись расписания отвергнута моделью Schedule
                или противоречит остальным записям
            DuplicateSchedule, PhaseNotFound: противоречивые записи
            LedgerInvariantViolation: totals повреждены или не согласованы
                с расписаниями
        """
        validate_engine_snapshot(data)

        try:
            phases = [Phase(**p) for p in data["phases"]]
        except ValidationError as e:
            raise InvalidPhase(f"Corrupted phase record: {e}") from e
        try:
            schedules = [Schedule(**s) for s in data["schedules"]]
        except ValidationError as e:
            raise InvalidSchedule(f"Corrupted schedule record: {e}") from e
        try:
            totals = LedgerTotals(**data["ledger"])
        except ValidationError as e:
            raise LedgerInvariantViolation(f"Corrupted ledger record: {e}") from e

        engine = cls(config=config, totals=totals, phases=phases, schedules=schedules)
        logger.info(
            "Engine restored: %s phases, %s schedules",
            len(engine.registry),
            len(engine.store),
        )
        return engine
