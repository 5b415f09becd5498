"""ReleaseExecutor — исполнение выплаты по расписанию.

Порядок release(schedule_id, requested_amount, now):
1. Поиск расписания и фазы (ScheduleNotFound / PhaseNotFound)
2. max_releasable = releasable(phase, schedule, now)
3. requested_amount > max_releasable (или ≤ 0) → InsufficientReleasable
4. requested_amount > pool_balance → InsufficientPoolBalance
5. Атомарно: schedule.released += amount; released_total += amount;
   pool_balance -= amount

Шаги 1-4 не имеют побочных эффектов. Все новые значения шага 5
вычисляются заранее (preview), после чего выполняется только замена
ссылок, которая не может упасть. Неуспешный вызов оставляет состояние
нетронутым.

Статус расписания производный: UNRELEASED → PARTIALLY_RELEASED →
FULLY_RELEASED (released == total_amount).
"""

import logging
from dataclasses import dataclass

from vestledger.accounting.ledger_accountant import LedgerAccountant
from vestledger.accounting.phase_registry import PhaseRegistry
from vestledger.accounting.schedule_store import ScheduleStore
from vestledger.core.domain.ledger_totals import LedgerTotals
from vestledger.core.domain.schedule import Schedule, ScheduleStatus
from vestledger.core.errors import InsufficientPoolBalance, InsufficientReleasable
from vestledger.core.math.integer_safeguards import (
    MAX_AMOUNT_UINT256,
    checked_add,
    validate_timestamp,
)
from vestledger.core.math.release_calculator import VestingBreakdown, vesting_breakdown

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class ReleaseReceipt:
    """Результат успешной выплаты."""

    schedule_id: str
    recipient: str
    phase_id: int
    amount: int
    now: float

    # Состояние расписания после выплаты
    released_after: int
    remaining_after: int
    vested_at_now: int
    status: ScheduleStatus

    # Состояние пула после выплаты
    pool_balance_after: int


# =============================================================================
# EXECUTOR
# =============================================================================


class ReleaseExecutor:
    """Оркестратор выплат: валидация → расчёт → атомарная мутация."""

    def __init__(
        self,
        registry: PhaseRegistry,
        store: ScheduleStore,
        ledger: LedgerAccountant,
        max_amount: int = MAX_AMOUNT_UINT256,
    ):
        self.registry = registry
        self.store = store
        self.ledger = ledger
        self.max_amount = max_amount

    def breakdown(self, schedule_id: str, now: float) -> VestingBreakdown:
        """Разложение vested/releasable для schedule_id на момент now."""
        schedule = self.store.get_schedule(schedule_id)
        phase = self.registry.get_phase(schedule.phase_id)
        return vesting_breakdown(phase, schedule, now, self.max_amount)

    def releasable(self, schedule_id: str, now: float) -> int:
        return self.breakdown(schedule_id, now).releasable

    def release(self, schedule_id: str, requested_amount: int, now: float) -> ReleaseReceipt:
        """Выплата requested_amount по расписанию.

        Raises:
            ScheduleNotFound, PhaseNotFound: шаг 1
            InsufficientReleasable: шаг 3 (включая requested_amount ≤ 0)
            InsufficientPoolBalance: шаг 4
            ArithmeticOverflow: сумма вне представимого диапазона
            ValueError: requested_amount не int или now не finite
        """
        if isinstance(requested_amount, bool) or not isinstance(requested_amount, int):
            raise ValueError(f"requested_amount must be an integer amount, got {requested_amount!r}")
        now = validate_timestamp(now)

        breakdown = self.breakdown(schedule_id, now)
        if requested_amount <= 0 or requested_amount > breakdown.releasable:
            logger.warning(
                "Release rejected for %s: requested=%s releasable=%s now=%s",
                schedule_id,
                requested_amount,
                breakdown.releasable,
                now,
            )
            raise InsufficientReleasable(schedule_id, requested_amount, breakdown.releasable)

        try:
            new_totals = self.ledger.preview_release(requested_amount)
        except InsufficientPoolBalance:
            logger.warning(
                "Release rejected for %s: requested=%s exceeds pool balance %s",
                schedule_id,
                requested_amount,
                self.ledger.totals().pool_balance,
            )
            raise
        new_schedule = self.store.preview_release(schedule_id, requested_amount)

        self._commit([new_schedule], new_totals)

        logger.info(
            "Released %s to %s (schedule %s, phase %s): released=%s/%s pool=%s",
            requested_amount,
            new_schedule.recipient,
            schedule_id,
            new_schedule.phase_id,
            new_schedule.released,
            new_schedule.total_amount,
            new_totals.pool_balance,
        )
        return self._receipt(new_schedule, requested_amount, now, breakdown.vested, new_totals)

    def release_all(self, recipient: str, now: float) -> list[ReleaseReceipt]:
        """Выплата всего доступного по всем расписаниям получателя.

        Всё или ничего: если пул не покрывает сумму, ни одно расписание
        не изменяется. Расписания с releasable == 0 пропускаются.

        Returns:
            Список квитанций в порядке создания расписаний (может быть пустым)

        Raises:
            InsufficientPoolBalance: сумма releasable > pool_balance
        """
        now = validate_timestamp(now)

        pending: list[tuple[Schedule, VestingBreakdown]] = []
        total = 0
        for schedule in self.store.list_schedules(recipient):
            phase = self.registry.get_phase(schedule.phase_id)
            breakdown = vesting_breakdown(phase, schedule, now, self.max_amount)
            if breakdown.releasable > 0:
                pending.append((schedule, breakdown))
                total = checked_add(total, breakdown.releasable, self.max_amount)

        if not pending:
            logger.debug("Nothing releasable for %s at %s", recipient, now)
            return []

        new_totals = self.ledger.preview_release(total)
        updated = [
            self.store.preview_release(schedule.schedule_id, breakdown.releasable)
            for schedule, breakdown in pending
        ]

        self._commit(updated, new_totals)

        receipts = [
            self._receipt(schedule, breakdown.releasable, now, breakdown.vested, new_totals)
            for schedule, (_, breakdown) in zip(updated, pending)
        ]
        logger.info(
            "Released %s to %s across %s schedules, pool=%s",
            total,
            recipient,
            len(receipts),
            new_totals.pool_balance,
        )
        return receipts

    def _commit(self, schedules: list[Schedule], totals: LedgerTotals) -> None:
        for schedule in schedules:
            self.store.replace(schedule)
        self.ledger.commit(totals)

    @staticmethod
    def _receipt(
        schedule: Schedule,
        amount: int,
        now: float,
        vested: int,
        totals: LedgerTotals,
    ) -> ReleaseReceipt:
        return ReleaseReceipt(
            schedule_id=schedule.schedule_id,
            recipient=schedule.recipient,
            phase_id=schedule.phase_id,
            amount=amount,
            now=now,
            released_after=schedule.released,
            remaining_after=schedule.remaining,
            vested_at_now=vested,
            status=schedule.status,
            pool_balance_after=totals.pool_balance,
        )
