"""
Тесты для доменных моделей: Phase, Schedule, LedgerTotals

Покрывает:
- Создание и валидация моделей
- Производные свойства (cliff_end, vest_end, num_slices, status)
- Immutability (frozen=True)
- Монотонность released
"""

import pytest
from pydantic import ValidationError

from vestledger.core.domain import LedgerTotals, Phase, Schedule, ScheduleStatus


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def phase_data():
    return {
        "phase_id": 1,
        "start": 1_700_000_000,
        "cliff_duration": 600,
        "cliff_percent_tenths": 50,
        "vest_duration": 3600,
        "slice_seconds": 300,
        "name": "SEED",
    }


@pytest.fixture
def schedule_data():
    return {
        "schedule_id": "a" * 64,
        "recipient": "0xabc",
        "sequence_index": 0,
        "phase_id": 1,
        "total_amount": 1000,
        "cliff_percent_tenths": 50,
    }


# =============================================================================
# PHASE
# =============================================================================


class TestPhase:
    """Тесты модели Phase"""

    def test_derived_times(self, phase_data):
        phase = Phase(**phase_data)
        assert phase.cliff_end == 1_700_000_600
        assert phase.vest_end == 1_700_004_200
        assert phase.num_slices == 12

    def test_frozen(self, phase_data):
        phase = Phase(**phase_data)
        with pytest.raises(ValidationError):
            phase.start = 0

    def test_vest_not_multiple_of_slice(self, phase_data):
        phase_data["vest_duration"] = 3601
        with pytest.raises(ValidationError, match="not a multiple"):
            Phase(**phase_data)

    def test_zero_slice_rejected(self, phase_data):
        phase_data["slice_seconds"] = 0
        with pytest.raises(ValidationError):
            Phase(**phase_data)

    def test_percent_above_1000_rejected(self, phase_data):
        phase_data["cliff_percent_tenths"] = 1001
        with pytest.raises(ValidationError):
            Phase(**phase_data)

    def test_name_optional(self, phase_data):
        del phase_data["name"]
        assert Phase(**phase_data).name == ""


# =============================================================================
# SCHEDULE
# =============================================================================


class TestSchedule:
    """Тесты модели Schedule"""

    def test_defaults(self, schedule_data):
        schedule = Schedule(**schedule_data)
        assert schedule.released == 0
        assert schedule.remaining == 1000
        assert schedule.status == ScheduleStatus.UNRELEASED

    def test_status_progression(self, schedule_data):
        schedule = Schedule(**schedule_data)
        partial = schedule.with_released(400)
        full = partial.with_released(1000)
        assert partial.status == ScheduleStatus.PARTIALLY_RELEASED
        assert full.status == ScheduleStatus.FULLY_RELEASED
        assert full.remaining == 0
        # Исходный экземпляр не изменился
        assert schedule.released == 0

    def test_released_cannot_exceed_total(self, schedule_data):
        with pytest.raises(ValidationError, match="exceeds total_amount"):
            Schedule(**schedule_data, released=1001)

    def test_with_released_monotonic(self, schedule_data):
        schedule = Schedule(**schedule_data, released=500)
        with pytest.raises(ValueError, match="monotonic"):
            schedule.with_released(499)

    def test_with_released_validates_bound(self, schedule_data):
        schedule = Schedule(**schedule_data)
        with pytest.raises(ValidationError):
            schedule.with_released(1001)

    def test_amount_must_be_strict_int(self, schedule_data):
        schedule_data["total_amount"] = 1000.0
        with pytest.raises(ValidationError):
            Schedule(**schedule_data)

    def test_zero_total_rejected(self, schedule_data):
        schedule_data["total_amount"] = 0
        with pytest.raises(ValidationError):
            Schedule(**schedule_data)

    def test_frozen(self, schedule_data):
        schedule = Schedule(**schedule_data)
        with pytest.raises(ValidationError):
            schedule.released = 10


# =============================================================================
# LEDGER TOTALS
# =============================================================================


class TestLedgerTotals:
    """Тесты модели LedgerTotals"""

    def test_empty_defaults(self):
        totals = LedgerTotals()
        assert totals.committed == 0
        assert totals.pool_balance == 0
        assert totals.outstanding == 0

    def test_outstanding(self):
        totals = LedgerTotals(committed=1000, released_total=300, pool_balance=700, funded_total=1000)
        assert totals.outstanding == 700

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            LedgerTotals(pool_balance=-1)

    def test_huge_amounts(self):
        big = 2**255
        totals = LedgerTotals(committed=big, pool_balance=big, funded_total=big)
        assert totals.model_dump()["committed"] == big
