"""
Core math modules для vestledger

Целочисленные примитивы и расчёт разблокировки с гарантией точности.
"""

# Integer Safeguards
from vestledger.core.math.integer_safeguards import (
    # Ranges
    MAX_AMOUNT_UINT256,
    PERCENT_TENTHS_DENOMINATOR,
    # Checked arithmetic
    checked_add,
    checked_mul,
    checked_sub,
    clamp_amount,
    floor_div,
    mul_div_floor,
    # Validation
    validate_amount,
    validate_percent_tenths,
    validate_timestamp,
)

# Release Calculator
from vestledger.core.math.release_calculator import (
    UnlockEvent,
    VestingBreakdown,
    cliff_amount,
    iter_unlock_events,
    next_unlock_time,
    releasable,
    unlock_timeline,
    vested_amount,
    vesting_breakdown,
)

__all__ = [
    # Integer Safeguards — Ranges
    "MAX_AMOUNT_UINT256",
    "PERCENT_TENTHS_DENOMINATOR",
    # Integer Safeguards — Checked arithmetic
    "checked_add",
    "checked_mul",
    "checked_sub",
    "clamp_amount",
    "floor_div",
    "mul_div_floor",
    # Integer Safeguards — Validation
    "validate_amount",
    "validate_percent_tenths",
    "validate_timestamp",
    # Release Calculator — Types
    "UnlockEvent",
    "VestingBreakdown",
    # Release Calculator — Functions
    "cliff_amount",
    "iter_unlock_events",
    "next_unlock_time",
    "releasable",
    "unlock_timeline",
    "vested_amount",
    "vesting_breakdown",
]
