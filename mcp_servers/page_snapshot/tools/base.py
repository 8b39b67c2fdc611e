"""
Base utilities for the snapshot tools.

Provides:
- ToolContext: config, bridge and snapshot manager shared by every tool call
- active_tab: active-tab lookup that also forgets snapshots of closed tabs
- bounded: timeout wrapper for cross-process work
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

from ..bridge import PageBridge, TabInfo
from ..config import SnapshotConfig
from ..errors import NoActiveTab, SmartToolError
from ..manager import SnapshotManager

T = TypeVar("T")


@dataclass
class ToolContext:
    config: SnapshotConfig
    bridge: PageBridge
    manager: SnapshotManager

    @classmethod
    def create(cls, config: SnapshotConfig, bridge: PageBridge) -> ToolContext:
        return cls(config=config, bridge=bridge, manager=SnapshotManager(bridge, config))


async def active_tab(ctx: ToolContext) -> TabInfo:
    """The tab tools act on. Snapshot slots of tabs that no longer exist are dropped."""
    tabs = await ctx.bridge.list_tabs()
    ctx.manager.retain_tabs(t.id for t in tabs)
    if not tabs:
        raise NoActiveTab()
    return tabs[0]


async def bounded(work: Awaitable[T], seconds: float, *, tool: str, action: str) -> T:
    """Await cross-process work with a hard deadline. Timeouts are failures, not retries."""
    try:
        return await asyncio.wait_for(work, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise SmartToolError(
            tool=tool,
            action=action,
            reason=f"Timed out after {seconds:.1f}s",
            suggestion="The page may be busy or blocked by a dialog; retry or call take_snapshot again",
        ) from exc


__all__ = ["ToolContext", "active_tab", "bounded"]
