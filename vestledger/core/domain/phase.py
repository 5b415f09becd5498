"""
Phase — Модель фазы vesting-программы

Immutable Pydantic модель, описывающая именованную vesting-программу:
момент старта, cliff, долю разблокировки на cliff и нарезку (slices)
линейной разблокировки остатка.

Фаза после создания не изменяется. Все расписания (Schedule), привязанные
к фазе, разделяют её временные параметры.
"""

from pydantic import BaseModel, Field, model_validator


class Phase(BaseModel):
    """
    Модель vesting-фазы.

    Immutable модель (frozen=True). Временные параметры в секундах,
    моменты времени абсолютные (Unix timestamp).

    Шкала времени фазы:
        start ──cliff_duration──> cliff_end ──vest_duration──> vest_end
                                   │ cliff_percent_tenths     │ остаток
                                   │ разблокируется сразу     │ по slice_seconds
    """

    phase_id: int = Field(..., ge=0, description="Уникальный идентификатор фазы")
    start: int = Field(..., ge=0, description="Начало начисления (UTC, секунды)")
    cliff_duration: int = Field(..., ge=0, description="Длительность cliff (секунды)")
    cliff_percent_tenths: int = Field(
        ..., ge=0, le=1000, description="Доля на cliff в десятых процента (1000 = 100%)"
    )
    vest_duration: int = Field(
        ..., ge=0, description="Длительность линейной разблокировки после cliff (секунды)"
    )
    slice_seconds: int = Field(..., gt=0, description="Гранулярность разблокировки (секунды)")
    name: str = Field(default="", description="Отображаемое имя, без семантики")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_slicing(self) -> "Phase":
        """vest_duration обязан быть целым кратным slice_seconds."""
        if self.vest_duration % self.slice_seconds != 0:
            raise ValueError(
                f"vest_duration {self.vest_duration} is not a multiple of "
                f"slice_seconds {self.slice_seconds}"
            )
        return self

    @property
    def cliff_end(self) -> int:
        """Момент окончания cliff (первая разблокировка)."""
        return self.start + self.cliff_duration

    @property
    def vest_end(self) -> int:
        """Момент полной разблокировки."""
        return self.cliff_end + self.vest_duration

    @property
    def num_slices(self) -> int:
        """Количество slices линейной разблокировки (0 — остаток сразу на cliff)."""
        return self.vest_duration // self.slice_seconds
