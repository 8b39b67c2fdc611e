"""Tool schema definitions (JSON Schema draft-07 input schemas)."""

from __future__ import annotations

from typing import Any

_SCHEMA = "http://json-schema.org/draft-07/schema#"


def _tool(name: str, description: str, properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "$schema": _SCHEMA,
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return {"name": name, "description": description, "inputSchema": schema}


_UID = {"type": "string", "description": "The element UID from the snapshot (e.g. e12)"}

SNAPSHOT_TOOLS: list[dict[str, Any]] = [
    _tool(
        "take_snapshot",
        """Take an accessibility snapshot of the current page.
Returns a tree of interactive elements, one per line:
  uid=e5 button "Save" disabled
Indentation (two spaces) encodes depth. Use the uid with the *_by_uid tools.
A new snapshot invalidates every uid of the previous one.""",
        {},
    ),
    _tool(
        "search_snapshot",
        """Search the page snapshot for elements matching a query.
Terms are separated by | (any may match); * and ? are wildcards; matching is
case-insensitive against role, name and attributes. Example: "Sub*|Log*".""",
        {
            "query": {"type": "string", "description": "Search query (glob patterns, | for multiple terms)"},
            "contextLevels": {
                "type": ["integer", "null"],
                "default": 1,
                "description": "Number of context lines around matches",
            },
        },
        ["query"],
    ),
]

ELEMENT_TOOLS: list[dict[str, Any]] = [
    _tool(
        "click_element_by_uid",
        "Click an element by its UID from a snapshot. Use take_snapshot first to get element UIDs.",
        {"uid": _UID, "doubleClick": {"type": ["boolean", "null"], "description": "Whether to double click"}},
        ["uid"],
    ),
    _tool(
        "fill_element_by_uid",
        "Fill a text input by its UID from a snapshot. Use take_snapshot first to get element UIDs.",
        {"uid": _UID, "value": {"type": "string", "description": "The value to fill"}},
        ["uid", "value"],
    ),
    _tool(
        "hover_element_by_uid",
        "Hover over an element by its UID from a snapshot. Use take_snapshot first to get element UIDs.",
        {"uid": _UID},
        ["uid"],
    ),
    _tool(
        "get_editor_value_by_uid",
        "Get the value of an editor or input element by its UID. Supports Monaco Editor, CodeMirror, ACE, and standard inputs.",
        {"uid": _UID},
        ["uid"],
    ),
]

PAGE_TOOLS: list[dict[str, Any]] = [
    _tool("get_page_info", "Get information about the current active page (URL, title, id)", {}),
    _tool(
        "scroll_page",
        "Scroll the current page in a specific direction or to a position",
        {
            "direction": {"type": "string", "enum": ["up", "down", "top", "bottom"], "description": "Direction to scroll"},
            "pixels": {"type": ["integer", "null"], "default": 500, "description": "Pixels to scroll (for up/down)"},
        },
        ["direction"],
    ),
    _tool(
        "navigate_to_url",
        "Navigate the current tab to a specific URL",
        {
            "url": {"type": "string", "description": "The URL to navigate to"},
            "newTab": {"type": ["boolean", "null"], "description": "Whether to open in a new tab"},
        },
        ["url"],
    ),
    _tool(
        "get_page_content",
        "Get the text content of the current page",
        {"selector": {"type": ["string", "null"], "description": "CSS selector to get content from (default: body)"}},
    ),
    _tool(
        "click_element",
        "Click an element on the current page using a CSS selector",
        {"selector": {"type": "string", "description": "CSS selector of the element to click"}},
        ["selector"],
    ),
    _tool(
        "fill_form_field",
        "Fill a form field on the current page",
        {
            "selector": {"type": "string", "description": "CSS selector of the input field"},
            "value": {"type": "string", "description": "Value to fill in the field"},
        },
        ["selector", "value"],
    ),
]

TOOL_DEFINITIONS: list[dict[str, Any]] = [*PAGE_TOOLS, *SNAPSHOT_TOOLS, *ELEMENT_TOOLS]

__all__ = ["ELEMENT_TOOLS", "PAGE_TOOLS", "SNAPSHOT_TOOLS", "TOOL_DEFINITIONS"]
