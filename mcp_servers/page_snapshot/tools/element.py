"""
Element tools addressed by snapshot uid.

Each call resolves the uid against the active tab's current snapshot and holds
the handle only for the duration of one action.
"""

from __future__ import annotations

from typing import Any

from ..errors import NotSupportedEditor
from .base import ToolContext, active_tab, bounded


async def click_element_by_uid(ctx: ToolContext, uid: str, double_click: bool = False) -> dict[str, Any]:
    tab = await active_tab(ctx)
    async with ctx.manager.element(tab.id, uid) as handle:
        clicked = await bounded(
            handle.as_locator().click(count=2 if double_click else 1),
            ctx.config.action_timeout,
            tool="click_element_by_uid",
            action="click",
        )
    return {
        "success": True,
        "message": f"Element {'double ' if double_click else ''}clicked successfully",
        "uid": uid,
        "clicked": clicked,
    }


async def fill_element_by_uid(ctx: ToolContext, uid: str, value: str) -> dict[str, Any]:
    tab = await active_tab(ctx)
    async with ctx.manager.element(tab.id, uid) as handle:
        filled = await bounded(
            handle.as_locator().fill(value),
            ctx.config.action_timeout,
            tool="fill_element_by_uid",
            action="fill",
        )
    return {"success": True, "message": "Element filled successfully", "uid": uid, "length": filled["length"]}


async def hover_element_by_uid(ctx: ToolContext, uid: str) -> dict[str, Any]:
    tab = await active_tab(ctx)
    async with ctx.manager.element(tab.id, uid) as handle:
        hovered = await bounded(
            handle.as_locator().hover(),
            ctx.config.action_timeout,
            tool="hover_element_by_uid",
            action="hover",
        )
    return {"success": True, "message": "Element hovered successfully", "uid": uid, "hovered": hovered}


async def get_editor_value_by_uid(ctx: ToolContext, uid: str) -> dict[str, Any]:
    tab = await active_tab(ctx)
    async with ctx.manager.element(tab.id, uid) as handle:
        value = await bounded(
            handle.as_locator().get_editor_value(),
            ctx.config.action_timeout,
            tool="get_editor_value_by_uid",
            action="read",
        )
    if value is None:
        raise NotSupportedEditor(uid)
    return {"success": True, "uid": uid, "value": value, "length": len(value)}


__all__ = [
    "click_element_by_uid",
    "fill_element_by_uid",
    "get_editor_value_by_uid",
    "hover_element_by_uid",
]
