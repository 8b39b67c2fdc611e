"""Per-tab generation and uid counters."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UidAllocator:
    """Hands out uids for one tab session.

    Both counters only move forward, so a uid is never handed out twice for the
    same tab and every new snapshot gets a strictly larger generation.
    """

    prefix: str = "e"
    generation: int = 0
    _last_uid: int = 0

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def next_uid(self) -> str:
        self._last_uid += 1
        return f"{self.prefix}{self._last_uid}"

    @property
    def issued(self) -> int:
        return self._last_uid


__all__ = ["UidAllocator"]
