"""(tab, uid) -> ElementHandle, looked up in the tab's current generation only."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .bridge import PageBridge
from .errors import ElementNotActionable, StaleSnapshot
from .locator import ElementHandle
from .model import SnapshotNode
from .store import SnapshotStore


class ElementResolver:
    def __init__(self, store: SnapshotStore, bridge: PageBridge) -> None:
        self.store = store
        self.bridge = bridge

    def get_node_by_uid(self, tab_id: str, uid: str) -> SnapshotNode | None:
        return self.store.get_node(tab_id, uid)

    def get_element_by_uid(self, tab_id: str, uid: str) -> ElementHandle | None:
        """Resolve a uid to a handle.

        Raises StaleSnapshot when the uid is not in the current generation (never
        falls back to an older one). Returns None for structural nodes that have
        no DOM counterpart.
        """
        node = self.store.get_node(tab_id, (uid or "").strip())
        if node is None:
            raise StaleSnapshot(tab_id, uid)
        if node.backend_node_id is None:
            return None
        return ElementHandle(self.bridge, tab_id, node, node.backend_node_id)

    @asynccontextmanager
    async def element(self, tab_id: str, uid: str) -> AsyncIterator[ElementHandle]:
        """Scoped handle: disposed on exit whether the action succeeded or not.

        Usage:
            async with resolver.element(tab_id, "e3") as handle:
                await handle.as_locator().click()
        """
        handle = self.get_element_by_uid(tab_id, uid)
        if handle is None:
            raise ElementNotActionable(uid, "resolve", "Element has no DOM counterpart (structural node)")
        try:
            yield handle
        finally:
            await handle.dispose()


__all__ = ["ElementResolver"]
