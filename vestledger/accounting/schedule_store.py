"""ScheduleStore — хранилище vesting-расписаний получателей.

Append-only: расписания никогда не удаляются, единственное изменяемое
поле — released (через замену immutable экземпляра).

Индексы:
- schedule_id → Schedule
- recipient → [schedule_id, ...] в порядке создания
- (recipient, phase_id) → schedule_id (уникальность, O(1) DuplicateSchedule)
"""

import hashlib
import logging
from typing import Iterable

from pydantic import ValidationError

from vestledger.accounting.phase_registry import PhaseRegistry
from vestledger.core.domain.schedule import Schedule
from vestledger.core.errors import (
    DuplicateSchedule,
    InsufficientReleasable,
    InvalidSchedule,
    PhaseNotFound,
    ScheduleNotFound,
)
from vestledger.core.math.integer_safeguards import (
    MAX_AMOUNT_UINT256,
    checked_add,
    validate_amount,
    validate_percent_tenths,
)

logger = logging.getLogger(__name__)


def derive_schedule_id(recipient: str, phase_id: int, sequence_index: int) -> str:
    """
    Детерминированный идентификатор расписания.

    sha256 от "recipient:phase_id:sequence_index", hex. Стабилен между
    запусками процесса и может быть пересчитан вызывающим.
    """
    payload = f"{recipient}:{phase_id}:{sequence_index}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ScheduleStore:
    """Хранилище расписаний с индексом уникальности (recipient, phase_id)."""

    def __init__(
        self,
        registry: PhaseRegistry,
        schedules: Iterable[Schedule] | None = None,
        max_amount: int = MAX_AMOUNT_UINT256,
    ):
        """
        Args:
            registry: реестр фаз (проверка PhaseNotFound)
            schedules: ранее сохранённые расписания в порядке создания
            max_amount: представимый максимум сумм

        Raises:
            InvalidSchedule: если восстановленные данные противоречивы
            PhaseNotFound: если расписание ссылается на неизвестную фазу
        """
        self._registry = registry
        self._max_amount = max_amount
        self._by_id: dict[str, Schedule] = {}
        self._by_recipient: dict[str, list[str]] = {}
        self._unique: dict[tuple[str, int], str] = {}

        for schedule in schedules or ():
            self._restore_one(schedule)

    def __len__(self) -> int:
        return len(self._by_id)

    def _restore_one(self, schedule: Schedule) -> None:
        if not self._registry.phase_exists(schedule.phase_id):
            raise PhaseNotFound(schedule.phase_id)

        expected_index = len(self._by_recipient.get(schedule.recipient, []))
        if schedule.sequence_index != expected_index:
            raise InvalidSchedule(
                f"Schedule {schedule.schedule_id}: sequence_index "
                f"{schedule.sequence_index}, expected {expected_index}"
            )

        expected_id = derive_schedule_id(
            schedule.recipient, schedule.phase_id, schedule.sequence_index
        )
        if schedule.schedule_id != expected_id:
            raise InvalidSchedule(
                f"Schedule id {schedule.schedule_id} does not match derived id {expected_id}"
            )

        key = (schedule.recipient, schedule.phase_id)
        if key in self._unique:
            raise DuplicateSchedule(schedule.recipient, schedule.phase_id, self._unique[key])

        self._insert(schedule)

    def _insert(self, schedule: Schedule) -> None:
        self._by_id[schedule.schedule_id] = schedule
        self._by_recipient.setdefault(schedule.recipient, []).append(schedule.schedule_id)
        self._unique[(schedule.recipient, schedule.phase_id)] = schedule.schedule_id

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def prepare_schedule(
        self,
        recipient: str,
        total_amount: int,
        cliff_percent_tenths: int,
        phase_id: int,
    ) -> Schedule:
        """Валидация и построение расписания без записи в хранилище.

        Порядок проверок:
        1. Параметры (InvalidSchedule / ArithmeticOverflow)
        2. Существование фазы (PhaseNotFound)
        3. Уникальность (recipient, phase_id) (DuplicateSchedule)

        Returns:
            Новый Schedule с released=0
        """
        if not isinstance(recipient, str) or not recipient:
            raise InvalidSchedule(f"recipient must be a non-empty string, got {recipient!r}")
        try:
            validate_amount(total_amount, "total_amount", self._max_amount, allow_zero=False)
            validate_percent_tenths(cliff_percent_tenths)
        except ValueError as e:
            raise InvalidSchedule(str(e)) from e

        if not self._registry.phase_exists(phase_id):
            raise PhaseNotFound(phase_id)

        existing = self._unique.get((recipient, phase_id))
        if existing is not None:
            raise DuplicateSchedule(recipient, phase_id, existing)

        sequence_index = len(self._by_recipient.get(recipient, []))
        try:
            return Schedule(
                schedule_id=derive_schedule_id(recipient, phase_id, sequence_index),
                recipient=recipient,
                sequence_index=sequence_index,
                phase_id=phase_id,
                total_amount=total_amount,
                cliff_percent_tenths=cliff_percent_tenths,
            )
        except ValidationError as e:
            raise InvalidSchedule(str(e)) from e

    def insert(self, schedule: Schedule) -> None:
        """Запись подготовленного prepare_schedule расписания.

        Raises:
            DuplicateSchedule: если между prepare и insert появился дубликат
        """
        key = (schedule.recipient, schedule.phase_id)
        if key in self._unique:
            raise DuplicateSchedule(schedule.recipient, schedule.phase_id, self._unique[key])
        self._insert(schedule)
        logger.info(
            "Schedule %s added: recipient=%s phase=%s total=%s cliff=%s‰",
            schedule.schedule_id,
            schedule.recipient,
            schedule.phase_id,
            schedule.total_amount,
            schedule.cliff_percent_tenths,
        )

    def add_schedule(
        self,
        recipient: str,
        total_amount: int,
        cliff_percent_tenths: int,
        phase_id: int,
    ) -> str:
        """Добавление расписания получателю.

        Returns:
            schedule_id
        """
        schedule = self.prepare_schedule(recipient, total_amount, cliff_percent_tenths, phase_id)
        self.insert(schedule)
        return schedule.schedule_id

    def preview_release(self, schedule_id: str, amount: int) -> Schedule:
        """Расписание после выплаты amount (без записи).

        Raises:
            ScheduleNotFound: неизвестный schedule_id
            InsufficientReleasable: released + amount > total_amount
        """
        schedule = self.get_schedule(schedule_id)
        new_released = checked_add(schedule.released, amount, self._max_amount)
        try:
            return schedule.with_released(new_released)
        except (ValidationError, ValueError) as e:
            raise InsufficientReleasable(schedule_id, amount, schedule.remaining) from e

    def replace(self, schedule: Schedule) -> None:
        """Замена экземпляра расписания (только released может отличаться)."""
        current = self.get_schedule(schedule.schedule_id)
        if current.model_dump(exclude={"released"}) != schedule.model_dump(exclude={"released"}):
            raise InvalidSchedule(f"Schedule {schedule.schedule_id}: only 'released' may change")
        if schedule.released < current.released:
            raise InvalidSchedule(f"Schedule {schedule.schedule_id}: released may not decrease")
        self._by_id[schedule.schedule_id] = schedule

    def record_release(self, schedule_id: str, amount: int) -> Schedule:
        """Увеличение released на amount. Вызывается только ReleaseExecutor."""
        updated = self.preview_release(schedule_id, amount)
        self.replace(updated)
        return updated

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_schedule(self, schedule_id: str) -> Schedule:
        """
        Raises:
            ScheduleNotFound: если расписание не найдено
        """
        try:
            return self._by_id[schedule_id]
        except KeyError:
            raise ScheduleNotFound(schedule_id) from None

    def schedule_exists(self, recipient: str, phase_id: int) -> bool:
        return (recipient, phase_id) in self._unique

    def list_schedules(self, recipient: str) -> list[Schedule]:
        """Расписания получателя в порядке создания (пустой список, если нет)."""
        return [self._by_id[sid] for sid in self._by_recipient.get(recipient, [])]

    def schedule_count(self, recipient: str) -> int:
        return len(self._by_recipient.get(recipient, []))

    def schedule_id_at(self, recipient: str, index: int) -> str:
        """
        Raises:
            ScheduleNotFound: если index вне диапазона
        """
        ids = self._by_recipient.get(recipient, [])
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(ids):
            raise ScheduleNotFound(f"{recipient}#{index}")
        return ids[index]

    def schedule_at(self, recipient: str, index: int) -> Schedule:
        return self._by_id[self.schedule_id_at(recipient, index)]

    def all_schedules(self) -> list[Schedule]:
        """Все расписания в глобальном порядке создания."""
        return list(self._by_id.values())
