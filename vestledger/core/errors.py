"""
Errors — Иерархия ошибок движка vesting-учёта

Все ошибки наследуются от VestingError и возвращаются непосредственному
вызывающему. Движок ничего не ретраит сам: политика повтора (например,
повторный запрос releasable после пополнения пула) принадлежит вызывающему.

Классы ошибок:
- Восстановимые (ожидание или внешнее действие):
  InsufficientReleasable ("ещё не разблокировано, попробуйте позже"),
  InsufficientPoolBalance ("пул требует пополнения")
- Ошибки использования (повтор без изменения запроса бессмыслен):
  InvalidPhase, InvalidSchedule, PhaseNotFound, ScheduleNotFound, DuplicateSchedule
- Критические: ArithmeticOverflow, LedgerInvariantViolation

ИНВАРИАНТ: неуспешная мутация оставляет состояние байт-в-байт неизменным.
"""


class VestingError(Exception):
    """Базовая ошибка движка vesting-учёта."""


# =============================================================================
# ОШИБКИ ИСПОЛЬЗОВАНИЯ
# =============================================================================


class InvalidPhase(VestingError):
    """Некорректные параметры фазы (slice/duration/percent)."""


class InvalidSchedule(VestingError):
    """Некорректные параметры расписания (amount/percent/recipient)."""


class PhaseNotFound(VestingError):
    """Фаза с указанным phase_id не зарегистрирована."""

    def __init__(self, phase_id: int):
        self.phase_id = phase_id
        super().__init__(f"Phase {phase_id} not found")


class ScheduleNotFound(VestingError):
    """Расписание не найдено (по schedule_id или по индексу получателя)."""

    def __init__(self, schedule_ref: str):
        self.schedule_ref = schedule_ref
        super().__init__(f"Schedule {schedule_ref} not found")


class DuplicateSchedule(VestingError):
    """У получателя уже есть расписание в этой фазе."""

    def __init__(self, recipient: str, phase_id: int, existing_schedule_id: str):
        self.recipient = recipient
        self.phase_id = phase_id
        self.existing_schedule_id = existing_schedule_id
        super().__init__(
            f"Recipient {recipient} already holds schedule {existing_schedule_id} "
            f"in phase {phase_id}"
        )


# =============================================================================
# ВОССТАНОВИМЫЕ ОШИБКИ
# =============================================================================


class InsufficientReleasable(VestingError):
    """Запрошено больше, чем разблокировано на момент now."""

    def __init__(self, schedule_id: str, requested: int, releasable: int):
        self.schedule_id = schedule_id
        self.requested = requested
        self.releasable = releasable
        super().__init__(
            f"Schedule {schedule_id}: requested {requested} exceeds "
            f"releasable {releasable}"
        )


class InsufficientPoolBalance(VestingError):
    """В пуле недостаточно средств для выплаты или вывода."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Pool balance insufficient: requested {requested}, available {available}"
        )


# =============================================================================
# КРИТИЧЕСКИЕ ОШИБКИ
# =============================================================================


class ArithmeticOverflow(VestingError):
    """Произведение или сумма сумм вышли за представимый диапазон."""


class LedgerInvariantViolation(VestingError):
    """
    Нарушен глобальный инвариант ledger.

    Возникает только при аудите (check_invariants) или восстановлении
    из внешнего хранилища с повреждёнными данными. Штатные мутации
    не могут привести к этому состоянию.
    """


RECOVERABLE_ERRORS: tuple[type[VestingError], ...] = (
    InsufficientReleasable,
    InsufficientPoolBalance,
)


def is_recoverable(error: BaseException) -> bool:
    """True, если ошибка снимается ожиданием или пополнением пула."""
    return isinstance(error, RECOVERABLE_ERRORS)
