"""
SnapshotManager: the engine's public surface.

Wires builder, store, formatter, search and resolver together around one
injected bridge and store, so tests can run the whole engine against a fake
browser.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from .bridge import PageBridge
from .builder import SnapshotBuilder
from .config import SnapshotConfig
from .formatter import format_snapshot
from .locator import ElementHandle
from .model import Snapshot, SnapshotNode
from .resolver import ElementResolver
from .search import search_snapshot
from .store import SnapshotStore

logger = logging.getLogger("mcp.page_snapshot.manager")


class SnapshotManager:
    def __init__(
        self,
        bridge: PageBridge,
        config: SnapshotConfig | None = None,
        *,
        store: SnapshotStore | None = None,
    ) -> None:
        self.bridge = bridge
        self.config = config or SnapshotConfig()
        self.store = store if store is not None else SnapshotStore()
        self.builder = SnapshotBuilder(bridge, self.config)
        self.resolver = ElementResolver(self.store, bridge)

    async def create_snapshot(self, tab_id: str) -> Snapshot:
        """Build a new snapshot and make it the tab's current generation."""
        started = time.monotonic()
        root, tab = await self.builder.build(tab_id, self.store.allocator(tab_id))
        snapshot = self.store.commit(tab_id, root, url=tab.url, title=tab.title)
        logger.info(
            "snapshot tab=%s generation=%d nodes=%d ms=%d",
            tab_id,
            snapshot.generation,
            len(snapshot),
            int((time.monotonic() - started) * 1000),
        )
        return snapshot

    def get_snapshot(self, tab_id: str) -> Snapshot | None:
        return self.store.get(tab_id)

    @staticmethod
    def format_snapshot(snapshot: Snapshot) -> str:
        return format_snapshot(snapshot)

    async def search_and_format(self, tab_id: str, query: str, context_levels: int = 1) -> str | None:
        """Search the tab's current snapshot, taking one first if the tab has none.

        None means "no matches"; it is never used for errors.
        """
        snapshot = self.store.get(tab_id)
        if snapshot is None:
            snapshot = await self.create_snapshot(tab_id)
        return search_snapshot(snapshot, query, context_levels)

    def get_node_by_uid(self, tab_id: str, uid: str) -> SnapshotNode | None:
        return self.resolver.get_node_by_uid(tab_id, uid)

    def get_element_by_uid(self, tab_id: str, uid: str) -> ElementHandle | None:
        return self.resolver.get_element_by_uid(tab_id, uid)

    @asynccontextmanager
    async def element(self, tab_id: str, uid: str) -> AsyncIterator[ElementHandle]:
        async with self.resolver.element(tab_id, uid) as handle:
            yield handle

    def drop_tab(self, tab_id: str) -> None:
        self.store.drop(tab_id)

    def retain_tabs(self, live_tab_ids: Iterable[str]) -> list[str]:
        dropped = self.store.retain(live_tab_ids)
        if dropped:
            logger.info("dropped snapshots of closed tabs: %s", ",".join(dropped))
        return dropped


__all__ = ["SnapshotManager"]
