"""
Element tool handlers - uid-addressed actions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools as snapshot_tools
from ..types import ToolResult

if TYPE_CHECKING:
    from ...tools.base import ToolContext


async def handle_click_element_by_uid(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.click_element_by_uid(ctx, args["uid"], double_click=bool(args.get("doubleClick")))
    return ToolResult.json(result)


async def handle_fill_element_by_uid(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.fill_element_by_uid(ctx, args["uid"], str(args["value"]))
    return ToolResult.json(result)


async def handle_hover_element_by_uid(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.hover_element_by_uid(ctx, args["uid"])
    return ToolResult.json(result)


async def handle_get_editor_value_by_uid(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.get_editor_value_by_uid(ctx, args["uid"])
    return ToolResult.json(result)


ELEMENT_HANDLERS: dict[str, Any] = {
    "click_element_by_uid": handle_click_element_by_uid,
    "fill_element_by_uid": handle_fill_element_by_uid,
    "hover_element_by_uid": handle_hover_element_by_uid,
    "get_editor_value_by_uid": handle_get_editor_value_by_uid,
}
