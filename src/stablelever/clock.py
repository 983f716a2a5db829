"""
Chain clock abstraction.

The engine never reads wall time; every staleness check is made against a
clock snapshot supplied by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChainClock(Protocol):
    """Read-only view of the ledger clock."""

    def slot(self) -> int: ...

    def epoch(self) -> int: ...

    def unix_timestamp(self) -> int: ...


@dataclass(frozen=True)
class FixedClock:
    """Immutable clock snapshot (also the natural test double)."""
    current_slot: int
    current_epoch: int
    current_unix_timestamp: int

    def __post_init__(self):
        if self.current_slot < 0 or self.current_epoch < 0:
            raise ValueError("slot and epoch must be >= 0")

    def slot(self) -> int:
        return self.current_slot

    def epoch(self) -> int:
        return self.current_epoch

    def unix_timestamp(self) -> int:
        return self.current_unix_timestamp


__all__ = ["ChainClock", "FixedClock"]
