"""Snapshot tools: take a snapshot of the active tab, search the current one."""

from __future__ import annotations

from typing import Any

from .base import ToolContext, active_tab, bounded


async def take_snapshot(ctx: ToolContext) -> dict[str, Any]:
    """Accessibility snapshot of the active tab, with uids for element tools."""
    tab = await active_tab(ctx)
    snapshot = await bounded(
        ctx.manager.create_snapshot(tab.id), ctx.config.snapshot_timeout, tool="take_snapshot", action="snapshot"
    )
    return {
        "success": True,
        "tabId": tab.id,
        "title": snapshot.title or tab.title,
        "url": snapshot.url or tab.url,
        "generation": snapshot.generation,
        "nodes": len(snapshot),
        "snapshot": ctx.manager.format_snapshot(snapshot),
    }


async def search_snapshot(ctx: ToolContext, query: str, context_levels: int | None = 1) -> dict[str, Any]:
    """Glob search (terms joined by |) over the active tab's snapshot."""
    tab = await active_tab(ctx)
    levels = 1 if context_levels is None else max(0, int(context_levels))
    result = await bounded(
        ctx.manager.search_and_format(tab.id, query, levels),
        ctx.config.snapshot_timeout,
        tool="search_snapshot",
        action="search",
    )
    return {
        "success": True,
        "tabId": tab.id,
        "matched": result is not None,
        "result": result if result is not None else "No matches found",
    }


__all__ = ["search_snapshot", "take_snapshot"]
