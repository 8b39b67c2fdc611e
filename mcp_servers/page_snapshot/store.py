"""
Snapshot store: one slot per tab holding that tab's latest snapshot.

Slots are only ever replaced whole, so a reader sees either the previous
snapshot or the new one, never a partial tree. Tabs are independent.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from .identity import UidAllocator
from .model import Snapshot, SnapshotNode

logger = logging.getLogger("mcp.page_snapshot.store")


class SnapshotStore:
    def __init__(self) -> None:
        self._slots: dict[str, Snapshot] = {}
        self._allocators: dict[str, UidAllocator] = {}

    def allocator(self, tab_id: str) -> UidAllocator:
        """Uid allocator for a tab, created on first use."""
        alloc = self._allocators.get(tab_id)
        if alloc is None:
            alloc = self._allocators[tab_id] = UidAllocator()
        return alloc

    def commit(
        self,
        tab_id: str,
        root: SnapshotNode,
        *,
        url: str = "",
        title: str = "",
        timestamp: float | None = None,
    ) -> Snapshot:
        """Install a freshly built tree as the tab's current snapshot.

        The generation is taken at commit time, so the last snapshot to finish is
        both the one stored and the one with the highest generation.
        """
        generation = self.allocator(tab_id).next_generation()
        snapshot = Snapshot(
            tab_id=tab_id,
            generation=generation,
            root=root,
            timestamp=time.time() if timestamp is None else timestamp,
            url=url,
            title=title,
        )
        self._slots[tab_id] = snapshot
        logger.debug("snapshot committed tab=%s generation=%d nodes=%d", tab_id, generation, len(snapshot))
        return snapshot

    def get(self, tab_id: str) -> Snapshot | None:
        return self._slots.get(tab_id)

    def get_node(self, tab_id: str, uid: str) -> SnapshotNode | None:
        """Look up a uid in the tab's current generation only."""
        snapshot = self._slots.get(tab_id)
        if snapshot is None:
            return None
        return snapshot.get(uid)

    def drop(self, tab_id: str) -> None:
        """Forget everything about a tab (tab closed)."""
        if self._slots.pop(tab_id, None) is not None:
            logger.debug("snapshot dropped tab=%s", tab_id)
        self._allocators.pop(tab_id, None)

    def retain(self, live_tab_ids: Iterable[str]) -> list[str]:
        """Drop slots of tabs that no longer exist. Returns the dropped tab ids."""
        live = set(live_tab_ids)
        gone = [tid for tid in set(self._slots) | set(self._allocators) if tid not in live]
        for tid in gone:
            self.drop(tid)
        return sorted(gone)

    def tab_ids(self) -> list[str]:
        return sorted(self._slots)

    def __len__(self) -> int:
        return len(self._slots)


__all__ = ["SnapshotStore"]
