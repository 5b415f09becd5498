"""
vestledger — vesting accounting engine.

Phase registry, per-recipient schedule store, releasable-amount calculator
and ledger accountant with integer-exact, monotonic, atomic releases.
"""

from vestledger.config import EngineConfig
from vestledger.engine import VestingEngine

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "VestingEngine",
]
