"""
Page tool handlers - info, scroll, navigation, content, selector actions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools as snapshot_tools
from ..types import ToolResult

if TYPE_CHECKING:
    from ...tools.base import ToolContext


async def handle_get_page_info(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(await snapshot_tools.get_page_info(ctx))


async def handle_scroll_page(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.scroll_page(ctx, str(args.get("direction") or ""), args.get("pixels", 500))
    return ToolResult.json(result)


async def handle_navigate_to_url(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    result = await snapshot_tools.navigate_to_url(ctx, str(args.get("url") or ""), new_tab=bool(args.get("newTab")))
    return ToolResult.json(result)


async def handle_get_page_content(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(await snapshot_tools.get_page_content(ctx, args.get("selector") or "body"))


async def handle_click_element(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(await snapshot_tools.click_element(ctx, args["selector"]))


async def handle_fill_form_field(ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(await snapshot_tools.fill_form_field(ctx, args["selector"], str(args["value"])))


PAGE_HANDLERS: dict[str, Any] = {
    "get_page_info": handle_get_page_info,
    "scroll_page": handle_scroll_page,
    "navigate_to_url": handle_navigate_to_url,
    "get_page_content": handle_get_page_content,
    "click_element": handle_click_element,
    "fill_form_field": handle_fill_form_field,
}
