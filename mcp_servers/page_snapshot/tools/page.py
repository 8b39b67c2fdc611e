"""
Page tools that work without a snapshot: info, scroll, navigation, text
content and CSS-selector click/fill.
"""

from __future__ import annotations

import urllib.parse
from typing import Any

from ..errors import SmartToolError
from .base import ToolContext, active_tab, bounded

_SCROLL_JS = r"""
function (dir, px) {
  switch (dir) {
    case 'up': window.scrollBy({ top: -px, behavior: 'smooth' }); break;
    case 'down': window.scrollBy({ top: px, behavior: 'smooth' }); break;
    case 'top': window.scrollTo({ top: 0, behavior: 'smooth' }); break;
    case 'bottom': window.scrollTo({ top: document.body.scrollHeight, behavior: 'smooth' }); break;
  }
  return { x: window.scrollX, y: window.scrollY };
}
"""

_CONTENT_JS = r"""
function (sel) {
  let element = null;
  let usedSelector = sel;
  if (!sel || sel === 'body') {
    const candidates = ['article', 'main', '[role="main"]', '#content', '#main', '.main-content', 'body'];
    for (const candidate of candidates) {
      const found = document.querySelector(candidate);
      if (found) { element = found; usedSelector = candidate; break; }
    }
  } else {
    element = document.querySelector(sel);
  }
  if (!element) return null;
  return { content: element.innerText || element.textContent || '', usedSelector };
}
"""

_CLICK_SELECTOR_JS = r"""
function (sel) {
  const element = document.querySelector(sel);
  if (!element) return { success: false, error: 'Element not found' };
  if (element instanceof HTMLElement) { element.click(); return { success: true }; }
  return { success: false, error: 'Element is not clickable' };
}
"""

_FILL_SELECTOR_JS = r"""
function (sel, val) {
  const element = document.querySelector(sel);
  if (!element) return { success: false, error: 'Element not found' };
  if (element instanceof HTMLInputElement || element instanceof HTMLTextAreaElement) {
    element.value = val;
    element.dispatchEvent(new Event('input', { bubbles: true }));
    element.dispatchEvent(new Event('change', { bubbles: true }));
    return { success: true };
  }
  return { success: false, error: 'Element is not an input field' };
}
"""

_SCROLL_DIRECTIONS = {"up", "down", "top", "bottom"}
_NAV_SCHEMES = {"http", "https", "file", "about", "data"}

TRUNCATION_NOTE = "\n\n[SYSTEM NOTE: Content truncated. Please summarize the text above.]"


async def get_page_info(ctx: ToolContext) -> dict[str, Any]:
    tab = await active_tab(ctx)
    return {"url": tab.url, "title": tab.title, "id": tab.id}


async def scroll_page(ctx: ToolContext, direction: str, pixels: int | None = 500) -> dict[str, Any]:
    if direction not in _SCROLL_DIRECTIONS:
        raise SmartToolError(
            tool="scroll_page",
            action="validate",
            reason=f"Invalid direction: {direction}",
            suggestion="Use one of: up, down, top, bottom",
        )
    px = 500 if pixels is None else int(pixels)
    tab = await active_tab(ctx)
    pos = await bounded(
        ctx.bridge.execute_script(tab.id, _SCROLL_JS, [direction, px]),
        ctx.config.action_timeout,
        tool="scroll_page",
        action="scroll",
    )
    return {"success": True, "direction": direction, "scrolled": px, "position": pos}


async def navigate_to_url(ctx: ToolContext, url: str, new_tab: bool = False) -> dict[str, Any]:
    parsed = urllib.parse.urlparse(url or "")
    if parsed.scheme not in _NAV_SCHEMES or (parsed.scheme in {"http", "https"} and not parsed.netloc):
        raise SmartToolError(
            tool="navigate_to_url",
            action="validate",
            reason=f"Invalid URL: {url!r}",
            suggestion="Provide an absolute URL, e.g. https://example.com",
        )

    if new_tab:
        tab = await bounded(ctx.bridge.new_tab(url), ctx.config.action_timeout, tool="navigate_to_url", action="new_tab")
        return {"success": True, "tabId": tab.id, "url": url}

    tab = await active_tab(ctx)
    res = await bounded(
        ctx.bridge.send(tab.id, "Page.navigate", {"url": url}),
        ctx.config.action_timeout,
        tool="navigate_to_url",
        action="navigate",
    )
    if isinstance(res, dict) and res.get("errorText"):
        raise SmartToolError(
            tool="navigate_to_url",
            action="navigate",
            reason=str(res["errorText"]),
            suggestion="Check the URL and network connectivity",
            details={"url": url},
        )
    return {"success": True, "tabId": tab.id, "url": url}


async def get_page_content(ctx: ToolContext, selector: str | None = "body") -> dict[str, Any]:
    sel = selector or "body"
    tab = await active_tab(ctx)
    extracted = await bounded(
        ctx.bridge.execute_script(tab.id, _CONTENT_JS, [sel]),
        ctx.config.action_timeout,
        tool="get_page_content",
        action="extract",
    )
    content = extracted.get("content") if isinstance(extracted, dict) else None
    if not content:
        raise SmartToolError(
            tool="get_page_content",
            action="extract",
            reason=f"No content found for selector: {sel}",
            suggestion="Try a broader selector or call take_snapshot",
        )

    max_len = ctx.config.max_content_length
    truncated = len(content) > max_len
    return {
        "content": content[:max_len] + TRUNCATION_NOTE if truncated else content,
        "selector": extracted.get("usedSelector") or sel,
        "isTruncated": truncated,
        "totalLength": len(content),
    }


async def click_element(ctx: ToolContext, selector: str) -> dict[str, Any]:
    tab = await active_tab(ctx)
    res = await bounded(
        ctx.bridge.execute_script(tab.id, _CLICK_SELECTOR_JS, [selector]),
        ctx.config.action_timeout,
        tool="click_element",
        action="click",
    )
    if not isinstance(res, dict) or not res.get("success"):
        raise SmartToolError(
            tool="click_element",
            action="click",
            reason=(res or {}).get("error") or "Failed to click element",
            suggestion="Check the selector, or use take_snapshot and click_element_by_uid",
            details={"selector": selector},
        )
    return {"success": True, "selector": selector}


async def fill_form_field(ctx: ToolContext, selector: str, value: str) -> dict[str, Any]:
    tab = await active_tab(ctx)
    res = await bounded(
        ctx.bridge.execute_script(tab.id, _FILL_SELECTOR_JS, [selector, value]),
        ctx.config.action_timeout,
        tool="fill_form_field",
        action="fill",
    )
    if not isinstance(res, dict) or not res.get("success"):
        raise SmartToolError(
            tool="fill_form_field",
            action="fill",
            reason=(res or {}).get("error") or "Failed to fill form field",
            suggestion="Check the selector, or use take_snapshot and fill_element_by_uid",
            details={"selector": selector},
        )
    return {"success": True, "selector": selector, "length": len(value)}


__all__ = [
    "click_element",
    "fill_form_field",
    "get_page_content",
    "get_page_info",
    "navigate_to_url",
    "scroll_page",
]
