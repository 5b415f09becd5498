"""
Release Calculator — Точный расчёт vested/releasable сумм

Чистые функции без побочных эффектов: (phase, schedule, now) → amount.
Безопасно пересчитываются любое число раз из любого числа потоков.

АЛГОРИТМ:
    now < cliff_end                       → vested = 0
    cliff_amount    = floor(total * cliff_percent_tenths / 1000)
    remainder       = total - cliff_amount
    num_slices      = vest_duration / slice_seconds   (0 → остаток сразу на cliff)
    slices_elapsed  = min(num_slices, floor(max(0, now - cliff_end) / slice_seconds))
    per_slice       = floor(remainder / num_slices)
    post_cliff      = min(remainder, slices_elapsed * per_slice)
                      (slices_elapsed == num_slices → post_cliff = remainder)
    vested          = min(total, cliff_amount + post_cliff)
    releasable      = max(0, vested - released)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Суммы только int, нет rounding drift
2. vested монотонно не убывает по now
3. После vest_end vested == total (остаток от деления отдаётся последним slice)
4. releasable никогда не отрицателен (защита от нерегулярного now)
"""

from typing import Iterator, NamedTuple

from vestledger.core.domain.phase import Phase
from vestledger.core.domain.schedule import Schedule
from vestledger.core.math.integer_safeguards import (
    MAX_AMOUNT_UINT256,
    PERCENT_TENTHS_DENOMINATOR,
    clamp_amount,
    mul_div_floor,
    validate_timestamp,
)

# =============================================================================
# RESULT TYPES
# =============================================================================


class VestingBreakdown(NamedTuple):
    """Разложение vested суммы на момент now (для диагностики и отчётов)."""

    cliff_reached: bool  # now >= cliff_end
    cliff_amount: int  # floor(total * pct / 1000)
    remainder: int  # total - cliff_amount
    num_slices: int  # vest_duration / slice_seconds
    slices_elapsed: int  # min(num_slices, floor(elapsed / slice_seconds))
    per_slice: int  # floor(remainder / num_slices)
    post_cliff_vested: int  # разблокировано после cliff
    vested: int  # итого разблокировано
    releasable: int  # vested - released, ≥ 0


class UnlockEvent(NamedTuple):
    """Момент роста vested суммы."""

    timestamp: int
    vested: int  # накопленная vested сумма после события


# =============================================================================
# CORE
# =============================================================================


def _check_ownership(phase: Phase, schedule: Schedule) -> None:
    if schedule.phase_id != phase.phase_id:
        raise ValueError(
            f"Schedule {schedule.schedule_id} belongs to phase {schedule.phase_id}, "
            f"not {phase.phase_id}"
        )


def cliff_amount(schedule: Schedule, max_amount: int = MAX_AMOUNT_UINT256) -> int:
    """
    Сумма, разблокируемая ровно на cliff.

    Examples:
        cliff_percent_tenths=200, total=1000 → 200
        cliff_percent_tenths=75 (7.5%), total=999 → 74
    """
    return mul_div_floor(
        schedule.total_amount,
        schedule.cliff_percent_tenths,
        PERCENT_TENTHS_DENOMINATOR,
        max_amount,
    )


def vesting_breakdown(
    phase: Phase,
    schedule: Schedule,
    now: float,
    max_amount: int = MAX_AMOUNT_UINT256,
) -> VestingBreakdown:
    """
    Полное разложение vested/releasable на момент now.

    Args:
        phase: Фаза расписания
        schedule: Расписание (phase_id обязан совпадать)
        now: Момент времени, переданный вызывающим (int или float секунды)
        max_amount: Представимый максимум промежуточных произведений

    Returns:
        VestingBreakdown

    Raises:
        ValueError: Если now не finite или schedule не принадлежит phase
        ArithmeticOverflow: Если total * cliff_percent_tenths > max_amount
    """
    _check_ownership(phase, schedule)
    now = validate_timestamp(now)

    total = schedule.total_amount
    num_slices = phase.num_slices

    if now < phase.cliff_end:
        return VestingBreakdown(
            cliff_reached=False,
            cliff_amount=0,
            remainder=total,
            num_slices=num_slices,
            slices_elapsed=0,
            per_slice=0,
            post_cliff_vested=0,
            vested=0,
            releasable=0,
        )

    at_cliff = cliff_amount(schedule, max_amount)
    remainder = total - at_cliff

    if num_slices == 0:
        # vest_duration == 0: остаток разблокируется вместе с cliff
        slices_elapsed = 0
        per_slice = 0
        post_cliff = remainder
    else:
        elapsed = max(0, now - phase.cliff_end)
        slices_elapsed = min(num_slices, int(elapsed // phase.slice_seconds))
        per_slice = remainder // num_slices
        if slices_elapsed == num_slices:
            post_cliff = remainder
        else:
            post_cliff = min(remainder, slices_elapsed * per_slice)

    vested = min(total, at_cliff + post_cliff)

    return VestingBreakdown(
        cliff_reached=True,
        cliff_amount=at_cliff,
        remainder=remainder,
        num_slices=num_slices,
        slices_elapsed=slices_elapsed,
        per_slice=per_slice,
        post_cliff_vested=post_cliff,
        vested=vested,
        releasable=clamp_amount(vested - schedule.released),
    )


def vested_amount(
    phase: Phase,
    schedule: Schedule,
    now: float,
    max_amount: int = MAX_AMOUNT_UINT256,
) -> int:
    """Разблокировано на момент now (включая уже выплаченное)."""
    return vesting_breakdown(phase, schedule, now, max_amount).vested


def releasable(
    phase: Phase,
    schedule: Schedule,
    now: float,
    max_amount: int = MAX_AMOUNT_UINT256,
) -> int:
    """
    Доступно к выплате на момент now: vested - released, не меньше 0.

    Examples:
        phase(start=0, cliff=600, pct=200, vest=4800, slice=600), total=1000:
        now=599  → 0
        now=600  → 200
        now=1200 → 300
        now=5400 → 1000
    """
    return vesting_breakdown(phase, schedule, now, max_amount).releasable


# =============================================================================
# TIMELINE
# =============================================================================


def iter_unlock_events(
    phase: Phase,
    schedule: Schedule,
    max_amount: int = MAX_AMOUNT_UINT256,
) -> Iterator[UnlockEvent]:
    """
    Итератор по моментам, в которые vested растёт.

    Генерирует события лениво: для фаз с большим числом slices
    вызывающий может остановиться в любой момент.

    Yields:
        UnlockEvent(timestamp, vested) с возрастающими timestamp и vested
    """
    _check_ownership(phase, schedule)

    previous = 0
    timestamps = (
        phase.cliff_end + k * phase.slice_seconds for k in range(phase.num_slices + 1)
    )
    for ts in timestamps:
        current = vested_amount(phase, schedule, ts, max_amount)
        if current > previous:
            yield UnlockEvent(timestamp=ts, vested=current)
            previous = current
        if current == schedule.total_amount:
            return


def unlock_timeline(
    phase: Phase,
    schedule: Schedule,
    max_amount: int = MAX_AMOUNT_UINT256,
) -> list[UnlockEvent]:
    """
    Полный список моментов разблокировки.

    Examples:
        phase(start=0, cliff=600, pct=200, vest=1200, slice=600), total=1000:
        [(600, 200), (1200, 600), (1800, 1000)]
    """
    return list(iter_unlock_events(phase, schedule, max_amount))


def next_unlock_time(
    phase: Phase,
    schedule: Schedule,
    now: float,
    max_amount: int = MAX_AMOUNT_UINT256,
) -> int | None:
    """
    Ближайший момент после now, когда vested вырастет.

    Returns:
        timestamp или None, если всё уже разблокировано
    """
    breakdown = vesting_breakdown(phase, schedule, now, max_amount)
    if breakdown.vested >= schedule.total_amount:
        return None

    if not breakdown.cliff_reached:
        candidate = phase.cliff_end
    else:
        candidate = phase.cliff_end + (breakdown.slices_elapsed + 1) * phase.slice_seconds

    # per_slice == 0: промежуточные slices ничего не дают, весь остаток в последнем
    remainder = schedule.total_amount - cliff_amount(schedule, max_amount)
    step_is_empty = phase.num_slices > 0 and remainder // phase.num_slices == 0

    while vested_amount(phase, schedule, candidate, max_amount) <= breakdown.vested:
        candidate = phase.vest_end if step_is_empty else candidate + phase.slice_seconds

    return candidate
