"""PhaseRegistry — реестр immutable vesting-фаз.

Фазы хранятся по phase_id. Существование фазы определяется явным
индексом (наличие ключа), а не эвристикой "хотя бы одно поле ненулевое".

Повторное создание существующего phase_id — намеренный пропуск
(create_phase возвращает False), а не ошибка и не перезапись.
"""

import logging
from typing import Iterable

from pydantic import ValidationError

from vestledger.core.domain.phase import Phase
from vestledger.core.errors import InvalidPhase, PhaseNotFound
from vestledger.core.math.integer_safeguards import PERCENT_TENTHS_DENOMINATOR

logger = logging.getLogger(__name__)


def _require_non_negative_int(value: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPhase(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidPhase(f"{name} must be non-negative, got {value}")


class PhaseRegistry:
    """Реестр vesting-фаз.

    Не потокобезопасен сам по себе: мутации сериализует VestingEngine.
    Чтения (get_phase, phase_exists) безопасны параллельно, так как
    Phase immutable, а запись в dict атомарна.
    """

    def __init__(self, phases: Iterable[Phase] | None = None):
        """
        Args:
            phases: ранее сохранённые фазы (восстановление из durable store)

        Raises:
            InvalidPhase: при повторяющемся phase_id во входных данных
        """
        self._phases: dict[int, Phase] = {}
        for phase in phases or ():
            if phase.phase_id in self._phases:
                raise InvalidPhase(f"Duplicate phase_id {phase.phase_id} in restored data")
            self._phases[phase.phase_id] = phase

    def __len__(self) -> int:
        return len(self._phases)

    def __contains__(self, phase_id: object) -> bool:
        return phase_id in self._phases

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
        """Создание фазы.

        Порядок проверок:
        1. Валидация параметров (InvalidPhase)
        2. Существование phase_id → пропуск без изменений

        Returns:
            True если фаза создана, False если phase_id уже существует

        Raises:
            InvalidPhase: slice_seconds == 0, vest_duration не кратен
                slice_seconds, cliff_percent_tenths > 1000, отрицательные поля
        """
        for field_name, value in (
            ("phase_id", phase_id),
            ("start", start),
            ("vest_duration", vest_duration),
            ("cliff_duration", cliff_duration),
            ("cliff_percent_tenths", cliff_percent_tenths),
            ("slice_seconds", slice_seconds),
        ):
            _require_non_negative_int(value, field_name)

        if slice_seconds == 0:
            raise InvalidPhase(f"Phase {phase_id}: slice_seconds must be positive")
        if vest_duration % slice_seconds != 0:
            raise InvalidPhase(
                f"Phase {phase_id}: vest_duration {vest_duration} is not a multiple "
                f"of slice_seconds {slice_seconds}"
            )
        if cliff_percent_tenths > PERCENT_TENTHS_DENOMINATOR:
            raise InvalidPhase(
                f"Phase {phase_id}: cliff_percent_tenths {cliff_percent_tenths} "
                f"exceeds {PERCENT_TENTHS_DENOMINATOR}"
            )

        if phase_id in self._phases:
            logger.info("Phase %s (%s) already exists, creation skipped", phase_id, name)
            return False

        try:
            phase = Phase(
                phase_id=phase_id,
                start=start,
                cliff_duration=cliff_duration,
                cliff_percent_tenths=cliff_percent_tenths,
                vest_duration=vest_duration,
                slice_seconds=slice_seconds,
                name=name,
            )
        except ValidationError as e:
            raise InvalidPhase(f"Phase {phase_id}: {e}") from e

        self._phases[phase_id] = phase
        logger.info(
            "Phase %s (%s) created: start=%s cliff=%ss/%s‰ vest=%ss slice=%ss",
            phase_id,
            name,
            start,
            cliff_duration,
            cliff_percent_tenths,
            vest_duration,
            slice_seconds,
        )
        return True

    def phase_exists(self, phase_id: int) -> bool:
        return phase_id in self._phases

    def get_phase(self, phase_id: int) -> Phase:
        """
        Raises:
            PhaseNotFound: если фаза не зарегистрирована
        """
        try:
            return self._phases[phase_id]
        except KeyError:
            raise PhaseNotFound(phase_id) from None

    def list_phases(self) -> list[Phase]:
        """Все фазы в порядке создания."""
        return list(self._phases.values())
