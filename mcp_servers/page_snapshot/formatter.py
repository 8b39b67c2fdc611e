"""Snapshot -> line-oriented text, one node per line, two spaces per depth level."""

from __future__ import annotations

import json
from typing import Any

from .model import Snapshot, SnapshotNode

INDENT = "  "

# Attributes render in this order; unknown keys follow alphabetically.
_ATTRIBUTE_ORDER = (
    "value",
    "url",
    "level",
    "editor",
    "checked",
    "pressed",
    "selected",
    "expanded",
    "collapsed",
    "haspopup",
    "focused",
    "required",
    "readonly",
    "disabled",
    "modal",
)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _format_attr(key: str, value: Any) -> str | None:
    if value is True:
        return key
    if value is False or value is None:
        return None
    if isinstance(value, (int, float)):
        return f"{key}={value}"
    return f"{key}={_quote(str(value))}"


def _attr_keys(attributes: dict[str, Any] | Any) -> list[str]:
    known = [k for k in _ATTRIBUTE_ORDER if k in attributes]
    rest = sorted(k for k in attributes if k not in _ATTRIBUTE_ORDER)
    return known + rest


def node_body(node: SnapshotNode) -> str:
    """Searchable part of a line: role, quoted name and attributes (no uid, no indent)."""
    parts = [node.role, _quote(node.name)]
    for key in _attr_keys(node.attributes):
        rendered = _format_attr(key, node.attributes[key])
        if rendered:
            parts.append(rendered)
    return " ".join(parts)


def format_line(node: SnapshotNode, depth: int) -> str:
    return f"{INDENT * depth}uid={node.uid} {node_body(node)}"


def iter_lines(snapshot: Snapshot) -> list[tuple[SnapshotNode, int, str]]:
    """(node, depth, line) in document order."""
    return [(node, depth, format_line(node, depth)) for node, depth in snapshot.root.walk()]


def format_snapshot(snapshot: Snapshot) -> str:
    """Render a snapshot. Pure: the same snapshot always yields the same text."""
    return "\n".join(line for _node, _depth, line in iter_lines(snapshot))


__all__ = ["INDENT", "format_line", "format_snapshot", "iter_lines", "node_body"]
