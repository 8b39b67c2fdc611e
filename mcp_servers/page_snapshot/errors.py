"""
Typed failures raised by the snapshot engine.

Every error is a SmartToolError so the server can render it as an agent-facing
message with a concrete suggestion. Nothing here is retried automatically.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SmartToolError(Exception):
    """Structured error with context for AI agents."""

    tool: str
    action: str
    reason: str
    suggestion: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.tool}] {self.action} failed: {self.reason}. Suggestion: {self.suggestion}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": True,
            "kind": type(self).__name__,
            "tool": self.tool,
            "action": self.action,
            "reason": self.reason,
            "suggestion": self.suggestion,
            "details": self.details,
        }


class NoActiveTab(SmartToolError):
    def __init__(self, reason: str = "No active tab found") -> None:
        super().__init__(
            tool="tabs",
            action="active_tab",
            reason=reason,
            suggestion="Open a page in the browser (remote debugging must be enabled) and retry",
        )


class NavigationRestricted(SmartToolError):
    def __init__(self, url: str, reason: str | None = None) -> None:
        super().__init__(
            tool="snapshot",
            action="inject",
            reason=reason or f"Scripts cannot run on this page ({url or 'unknown url'})",
            suggestion="Navigate to a regular http(s) page; browser-internal pages cannot be inspected",
            details={"url": url},
        )


class StaleSnapshot(SmartToolError):
    def __init__(self, tab_id: str, uid: str) -> None:
        super().__init__(
            tool="element",
            action="resolve",
            reason="No such element found in the snapshot. The page content may have changed",
            suggestion="Call take_snapshot again and use a uid from the new snapshot",
            details={"tabId": tab_id, "uid": uid},
        )


class ElementNotActionable(SmartToolError):
    def __init__(self, uid: str, action: str, reason: str) -> None:
        super().__init__(
            tool="element",
            action=action,
            reason=reason,
            suggestion="Scroll the element into view or pick a visible element from a fresh snapshot",
            details={"uid": uid},
        )


class ElementDetached(ElementNotActionable):
    """The live node behind a uid is gone: not resolvable or no longer connected."""

    def __init__(self, uid: str, backend_node_id: int | None, reason: str | None = None) -> None:
        super().__init__(uid, "relocate", reason or "The element is no longer attached to the page")
        self.suggestion = "The page re-rendered since the snapshot; call take_snapshot again"
        self.details["backendDOMNodeId"] = backend_node_id


class NotAnInputField(SmartToolError):
    def __init__(self, uid: str, role: str) -> None:
        super().__init__(
            tool="element",
            action="fill",
            reason=f"Element {uid} ({role or 'unknown role'}) is not an input field",
            suggestion="Pick a textbox, searchbox, combobox or textarea uid from the snapshot",
            details={"uid": uid, "role": role},
        )


class NotSupportedEditor(SmartToolError):
    def __init__(self, uid: str) -> None:
        super().__init__(
            tool="element",
            action="get_editor_value",
            reason="Failed to get editor value - element may not be an input/textarea/editor",
            suggestion="Use a uid of an input, textarea, Monaco, CodeMirror or ACE editor",
            details={"uid": uid},
        )


__all__ = [
    "ElementDetached",
    "ElementNotActionable",
    "NavigationRestricted",
    "NoActiveTab",
    "NotAnInputField",
    "NotSupportedEditor",
    "SmartToolError",
    "StaleSnapshot",
]
