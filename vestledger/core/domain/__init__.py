"""
Domain models and value objects.

Contains fundamental domain entities: Phase, Schedule, LedgerTotals.
"""

from vestledger.core.domain.ledger_totals import LedgerTotals
from vestledger.core.domain.phase import Phase
from vestledger.core.domain.schedule import Schedule, ScheduleStatus

__all__ = [
    # Phase model
    "Phase",
    # Schedule model
    "Schedule",
    "ScheduleStatus",
    # Ledger model
    "LedgerTotals",
]
