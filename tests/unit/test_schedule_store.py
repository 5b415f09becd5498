"""
Тесты для ScheduleStore

Проверяет:
1. Детерминированный schedule_id
2. Уникальность (recipient, phase_id) → DuplicateSchedule
3. Порядок проверок: параметры → фаза → дубликат
4. Индексный доступ к расписаниям получателя
5. Монотонность released при замене экземпляра
"""

import pytest

from vestledger.accounting.phase_registry import PhaseRegistry
from vestledger.accounting.schedule_store import ScheduleStore, derive_schedule_id
from vestledger.core.domain import Schedule
from vestledger.core.errors import (
    ArithmeticOverflow,
    DuplicateSchedule,
    InsufficientReleasable,
    InvalidSchedule,
    PhaseNotFound,
    ScheduleNotFound,
)

ALICE = "0xalice"
BOB = "0xbob"


@pytest.fixture
def registry():
    registry = PhaseRegistry()
    for phase_id in (1, 2):
        registry.create_phase(
            phase_id=phase_id,
            start=0,
            vest_duration=4800,
            cliff_duration=600,
            cliff_percent_tenths=200,
            slice_seconds=600,
        )
    return registry


@pytest.fixture
def store(registry):
    return ScheduleStore(registry)


class TestScheduleId:
    def test_deterministic(self):
        assert derive_schedule_id(ALICE, 1, 0) == derive_schedule_id(ALICE, 1, 0)
        assert len(derive_schedule_id(ALICE, 1, 0)) == 64

    def test_distinct_inputs(self):
        ids = {
            derive_schedule_id(ALICE, 1, 0),
            derive_schedule_id(ALICE, 1, 1),
            derive_schedule_id(ALICE, 2, 0),
            derive_schedule_id(BOB, 1, 0),
        }
        assert len(ids) == 4


class TestAddSchedule:
    """Тесты add_schedule"""

    def test_add_and_get(self, store):
        sid = store.add_schedule(ALICE, 1000, 200, 1)
        schedule = store.get_schedule(sid)
        assert sid == derive_schedule_id(ALICE, 1, 0)
        assert schedule.total_amount == 1000
        assert schedule.released == 0
        assert schedule.sequence_index == 0
        assert store.schedule_exists(ALICE, 1)
        assert store.schedule_id_at(ALICE, 0) == sid
        assert len(store) == 1

    def test_duplicate_in_same_phase(self, store):
        sid = store.add_schedule(ALICE, 1000, 200, 1)
        with pytest.raises(DuplicateSchedule) as exc_info:
            store.add_schedule(ALICE, 5, 0, 1)
        assert exc_info.value.existing_schedule_id == sid
        assert store.schedule_count(ALICE) == 1

    def test_same_recipient_other_phase(self, store):
        first = store.add_schedule(ALICE, 1000, 200, 1)
        second = store.add_schedule(ALICE, 500, 0, 2)
        assert first != second
        assert [s.schedule_id for s in store.list_schedules(ALICE)] == [first, second]
        assert store.schedule_at(ALICE, 1).sequence_index == 1

    def test_unknown_phase(self, store):
        with pytest.raises(PhaseNotFound):
            store.add_schedule(ALICE, 1000, 200, 99)

    def test_parameter_errors_come_before_phase_lookup(self, store):
        with pytest.raises(InvalidSchedule):
            store.add_schedule(ALICE, 0, 200, 99)

    def test_invalid_amounts(self, store):
        with pytest.raises(InvalidSchedule):
            store.add_schedule(ALICE, -1, 200, 1)
        with pytest.raises(InvalidSchedule):
            store.add_schedule(ALICE, 10.5, 200, 1)
        with pytest.raises(InvalidSchedule):
            store.add_schedule(ALICE, 1000, 1001, 1)

    def test_empty_recipient(self, store):
        with pytest.raises(InvalidSchedule, match="recipient"):
            store.add_schedule("", 1000, 200, 1)

    def test_amount_above_max(self, registry):
        store = ScheduleStore(registry, max_amount=10**6)
        with pytest.raises(ArithmeticOverflow):
            store.add_schedule(ALICE, 10**6 + 1, 200, 1)


class TestIndexedAccess:
    def test_empty_recipient_list(self, store):
        assert store.list_schedules(BOB) == []
        assert store.schedule_count(BOB) == 0

    def test_index_out_of_range(self, store):
        store.add_schedule(ALICE, 1000, 200, 1)
        with pytest.raises(ScheduleNotFound):
            store.schedule_id_at(ALICE, 1)
        with pytest.raises(ScheduleNotFound):
            store.schedule_id_at(ALICE, -1)
        with pytest.raises(ScheduleNotFound):
            store.schedule_id_at(BOB, 0)

    def test_unknown_schedule_id(self, store):
        with pytest.raises(ScheduleNotFound):
            store.get_schedule("f" * 64)


class TestReleasedUpdates:
    """released изменяется только вперёд и не выше total_amount."""

    def test_record_release(self, store):
        sid = store.add_schedule(ALICE, 1000, 200, 1)
        store.record_release(sid, 300)
        store.record_release(sid, 700)
        assert store.get_schedule(sid).released == 1000

    def test_release_beyond_total(self, store):
        sid = store.add_schedule(ALICE, 1000, 200, 1)
        store.record_release(sid, 900)
        with pytest.raises(InsufficientReleasable):
            store.record_release(sid, 101)
        assert store.get_schedule(sid).released == 900

    def test_preview_does_not_mutate(self, store):
        sid = store.add_schedule(ALICE, 1000, 200, 1)
        preview = store.preview_release(sid, 100)
        assert preview.released == 100
        assert store.get_schedule(sid).released == 0

    def test_replace_rejects_other_field_changes(self, store):
        sid = store.add_schedule(ALICE, 1000, 200, 1)
        tampered = store.get_schedule(sid).model_copy(update={"total_amount": 5000})
        with pytest.raises(InvalidSchedule, match="only 'released'"):
            store.replace(tampered)

    def test_replace_rejects_decrease(self, store):
        sid = store.add_schedule(ALICE, 1000, 200, 1)
        store.record_release(sid, 500)
        rolled_back = store.get_schedule(sid).model_copy(update={"released": 100})
        with pytest.raises(InvalidSchedule, match="decrease"):
            store.replace(rolled_back)


class TestRestore:
    def test_restore_round_trip(self, registry, store):
        store.add_schedule(ALICE, 1000, 200, 1)
        store.add_schedule(ALICE, 500, 0, 2)
        restored = ScheduleStore(registry, store.all_schedules())
        assert restored.all_schedules() == store.all_schedules()
        assert restored.schedule_exists(ALICE, 2)

    def test_restore_rejects_foreign_id(self, registry):
        forged = Schedule(
            schedule_id="0" * 64,
            recipient=ALICE,
            sequence_index=0,
            phase_id=1,
            total_amount=1000,
            cliff_percent_tenths=200,
        )
        with pytest.raises(InvalidSchedule, match="derived id"):
            ScheduleStore(registry, [forged])

    def test_restore_rejects_sequence_gap(self, registry):
        skipped = Schedule(
            schedule_id=derive_schedule_id(ALICE, 1, 1),
            recipient=ALICE,
            sequence_index=1,
            phase_id=1,
            total_amount=1000,
            cliff_percent_tenths=200,
        )
        with pytest.raises(InvalidSchedule, match="sequence_index"):
            ScheduleStore(registry, [skipped])
