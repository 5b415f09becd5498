"""
Schedule — Модель vesting-расписания получателя

Immutable Pydantic модель: аллокация одного получателя в одной фазе.
Единственное изменяемое по смыслу поле — released (накопленная выплата);
изменение выполняется созданием нового экземпляра через with_released().
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class ScheduleStatus(str, Enum):
    """
    Производный статус расписания (не хранится).

    UNRELEASED → PARTIALLY_RELEASED → FULLY_RELEASED
    """

    UNRELEASED = "UNRELEASED"
    PARTIALLY_RELEASED = "PARTIALLY_RELEASED"
    FULLY_RELEASED = "FULLY_RELEASED"


# =============================================================================
# SCHEDULE MODEL
# =============================================================================


class Schedule(BaseModel):
    """
    Модель vesting-расписания.

    schedule_id детерминированно выводится из (recipient, phase_id,
    sequence_index), см. ScheduleStore.derive_schedule_id.

    cliff_percent_tenths задаётся на уровне расписания и может отличаться
    от значения фазы; в расчёте используется значение расписания.
    """

    schedule_id: str = Field(..., min_length=1, description="Детерминированный идентификатор")
    recipient: str = Field(..., min_length=1, description="Получатель (beneficiary)")
    sequence_index: int = Field(..., ge=0, description="Порядковый номер у получателя")
    phase_id: int = Field(..., ge=0, description="Фаза-владелец")
    total_amount: int = Field(..., gt=0, strict=True, description="Всего к выплате (units)")
    cliff_percent_tenths: int = Field(
        ..., ge=0, le=1000, description="Доля на cliff в десятых процента"
    )
    released: int = Field(default=0, ge=0, strict=True, description="Уже выплачено (units)")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_released_bound(self) -> "Schedule":
        """released ≤ total_amount всегда."""
        if self.released > self.total_amount:
            raise ValueError(
                f"released {self.released} exceeds total_amount {self.total_amount}"
            )
        return self

    @property
    def remaining(self) -> int:
        """Ещё не выплачено (units)."""
        return self.total_amount - self.released

    @property
    def status(self) -> ScheduleStatus:
        if self.released == 0:
            return ScheduleStatus.UNRELEASED
        if self.released == self.total_amount:
            return ScheduleStatus.FULLY_RELEASED
        return ScheduleStatus.PARTIALLY_RELEASED

    def with_released(self, released: int) -> "Schedule":
        """
        Новый экземпляр с обновлённым released.

        Проходит полную валидацию модели (в отличие от model_copy).

        Raises:
            ValueError: Если released уменьшается
            pydantic.ValidationError: Если released > total_amount
        """
        if released < self.released:
            raise ValueError(
                f"released is monotonic: {released} < current {self.released}"
            )
        return Schedule(**{**self.model_dump(), "released": released})
