"""
Snapshot tool handlers - take and search accessibility snapshots.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools as snapshot_tools
from ..types import ToolResult

if TYPE_CHECKING:
    from ...tools.base import ToolContext


async def handle_take_snapshot(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.take_snapshot(ctx)
    header = (
        f"tabId: {result['tabId']}\n"
        f"title: {result['title']}\n"
        f"url: {result['url']}\n"
        f"generation: {result['generation']}\n"
    )
    return ToolResult.text(f"{header}\n{result['snapshot']}", data=result)


async def handle_search_snapshot(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.search_snapshot(ctx, str(args.get("query") or ""), args.get("contextLevels", 1))
    return ToolResult.text(result["result"], data=result)


SNAPSHOT_HANDLERS: dict[str, Any] = {
    "take_snapshot": handle_take_snapshot,
    "search_snapshot": handle_search_snapshot,
}
