"""
Snapshot builder: accessibility tree -> compact SnapshotNode tree.

Chrome already computes roles and accessible names (ARIA first, then native
semantics, then text content). The builder filters that tree down to the
interactive and structurally meaningful nodes, assigns uids in depth-first
order and attaches the few attributes an agent needs to act.
"""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Any

from .bridge import PageBridge, TabInfo, is_restricted_url
from .cdp import CdpError
from .config import SnapshotConfig
from .errors import NavigationRestricted, NoActiveTab, SmartToolError
from .identity import UidAllocator
from .js_helpers import EDITOR_INPUT_SELECTORS, PAGE_SCAN_JS, ZERO_SIZE_CANDIDATES, ZERO_SIZE_MARK
from .model import SnapshotNode

logger = logging.getLogger("mcp.page_snapshot.builder")

EDITOR_OBJECT_GROUP = "page-snapshot-editors"

# Subtrees never worth showing.
_DROP_SUBTREE_ROLES = {"InlineTextBox", "ListMarker"}

# Wrappers that carry no meaning on their own; unnamed ones are replaced by their children.
_COLLAPSIBLE_ROLES = {
    "generic",
    "none",
    "presentation",
    "LineBreak",
    "GenericContainer",
    "Section",
    "paragraph",
    "group",
    "LayoutTable",
    "LayoutTableRow",
    "LayoutTableCell",
}

_VALUE_ROLES = {"textbox", "searchbox", "combobox", "spinbutton", "slider"}

_FLAG_PROPS = ("checked", "pressed", "selected", "disabled", "focused", "required", "readonly", "modal")


def _ax_value(value: Any) -> Any:
    """CDP AXValue is usually a dict with {type,value}. Return the underlying value."""
    if isinstance(value, dict) and "value" in value:
        return value.get("value")
    return value


def _clean_text(text: Any, limit: int) -> str:
    s = " ".join(str(text if text is not None else "").split())
    if len(s) > limit:
        s = s[: max(0, limit - 3)].rstrip() + "..."
    return s


def _props(node: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for p in node.get("properties") or []:
        if isinstance(p, dict) and isinstance(p.get("name"), str):
            out[p["name"]] = _ax_value(p.get("value"))
    return out


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in {"true", "mixed"}
    return value is True


def _backend_id(node: dict[str, Any]) -> int | None:
    raw = node.get("backendDOMNodeId") or node.get("backendDomNodeId")
    if isinstance(raw, (int, float)) and int(raw) > 0:
        return int(raw)
    return None


class SnapshotBuilder:
    def __init__(self, bridge: PageBridge, config: SnapshotConfig) -> None:
        self.bridge = bridge
        self.config = config

    async def build(self, tab_id: str, allocator: UidAllocator) -> tuple[SnapshotNode, TabInfo]:
        """Walk the tab's accessibility tree. Fails whole; never returns a partial tree."""
        tab = await self.bridge.get_tab(tab_id)
        if tab is None:
            raise NoActiveTab(f"Tab {tab_id} not found")
        if is_restricted_url(tab.url):
            raise NavigationRestricted(tab.url)

        marks = await self._scan_page(tab)
        editors = {bid: kind for bid, kind in marks.items() if kind != ZERO_SIZE_MARK}
        zero_size = {bid for bid, kind in marks.items() if kind == ZERO_SIZE_MARK}
        nodes = await self._ax_nodes(tab_id)
        root = _TreeWalker(nodes, editors, allocator, self.config, zero_size=zero_size).run(tab)
        return root, tab

    async def _ax_nodes(self, tab_id: str) -> list[dict[str, Any]]:
        try:
            res = await self.bridge.send(tab_id, "Accessibility.getFullAXTree")
        except CdpError as exc:
            raise SmartToolError(
                tool="snapshot",
                action="getFullAXTree",
                reason=str(exc),
                suggestion="Wait for the page to finish loading, then call take_snapshot again",
            ) from exc

        nodes = res.get("nodes") if isinstance(res, dict) else None
        if not isinstance(nodes, list) or not nodes:
            raise SmartToolError(
                tool="snapshot",
                action="parse",
                reason="Accessibility.getFullAXTree returned no nodes",
                suggestion="Wait for the page to finish loading, then call take_snapshot again",
            )
        return [n for n in nodes if isinstance(n, dict)]

    async def _scan_page(self, tab: TabInfo) -> dict[int, str]:
        """Map backend node ids to a mark: an editor kind, or ZERO_SIZE_MARK.

        Doubles as the injection check: a page that refuses evaluation is reported
        as NavigationRestricted.
        """
        args = ", ".join(
            json.dumps(a)
            for a in ([list(pair) for pair in EDITOR_INPUT_SELECTORS], ZERO_SIZE_CANDIDATES, ZERO_SIZE_MARK)
        )
        try:
            res = await self.bridge.send(
                tab.id,
                "Runtime.evaluate",
                {
                    "expression": f"({PAGE_SCAN_JS})({args})",
                    "objectGroup": EDITOR_OBJECT_GROUP,
                    "returnByValue": False,
                },
            )
        except CdpError as exc:
            raise NavigationRestricted(tab.url, reason=f"Script injection denied: {exc}") from exc

        try:
            obj = res.get("result") if isinstance(res, dict) else None
            object_id = obj.get("objectId") if isinstance(obj, dict) else None
            if res.get("exceptionDetails") or not isinstance(object_id, str):
                return {}
            return await self._describe_marked_list(tab.id, object_id)
        finally:
            with contextlib.suppress(Exception):
                await self.bridge.send(tab.id, "Runtime.releaseObjectGroup", {"objectGroup": EDITOR_OBJECT_GROUP})

    async def _describe_marked_list(self, tab_id: str, array_object_id: str) -> dict[int, str]:
        props = await self.bridge.send(
            tab_id, "Runtime.getProperties", {"objectId": array_object_id, "ownProperties": True}
        )
        items: dict[int, Any] = {}
        for prop in props.get("result") or []:
            name = prop.get("name") if isinstance(prop, dict) else None
            if isinstance(name, str) and name.isdigit():
                items[int(name)] = prop.get("value") or {}

        marks: dict[int, str] = {}
        for i in range(0, len(items) - 1, 2):
            element, mark = items.get(i) or {}, (items.get(i + 1) or {}).get("value")
            object_id = element.get("objectId")
            if not isinstance(object_id, str) or not isinstance(mark, str):
                continue
            try:
                described = await self.bridge.send(tab_id, "DOM.describeNode", {"objectId": object_id})
            except CdpError:
                continue
            node = described.get("node") if isinstance(described, dict) else None
            backend_id = node.get("backendNodeId") if isinstance(node, dict) else None
            if isinstance(backend_id, int) and backend_id > 0:
                marks.setdefault(backend_id, mark)
        return marks


class _TreeWalker:
    """Converts one AX node list into a SnapshotNode tree.

    The walk keeps its own stack, so arbitrarily deep pages cannot exhaust the
    interpreter's recursion limit. Depth counts every AX level, hoisted wrappers
    included, and nothing below max_depth is visited.
    """

    def __init__(
        self,
        nodes: list[dict[str, Any]],
        editors: dict[int, str],
        allocator: UidAllocator,
        config: SnapshotConfig,
        *,
        zero_size: set[int] | frozenset[int] = frozenset(),
    ) -> None:
        self.by_id = {str(n.get("nodeId")): n for n in nodes if n.get("nodeId") is not None}
        self.nodes = nodes
        self.editors = editors
        self.zero_size = zero_size
        self.allocator = allocator
        self.name_limit = config.max_name_length
        self.max_depth = config.max_depth
        self._visited: set[str] = set()

    def _root(self) -> dict[str, Any]:
        for n in self.nodes:
            if not n.get("parentId"):
                return n
        return self.nodes[0]

    def run(self, tab: TabInfo) -> SnapshotNode:
        root = self._root()
        self._visited.add(str(root.get("nodeId")))
        uid = self.allocator.next_uid()
        title = _clean_text(_ax_value(root.get("name")) or tab.title, self.name_limit)
        children: list[SnapshotNode] = []
        self._walk(root, children, parent_name=title)
        attributes: dict[str, Any] = {"url": tab.url} if tab.url else {}
        return SnapshotNode(
            uid=uid,
            role=str(_ax_value(root.get("role")) or "RootWebArea"),
            name=title,
            backend_node_id=_backend_id(root),
            attributes=attributes,
            children=tuple(children),
        )

    def _push_children(
        self, stack: list[tuple], ax: dict[str, Any], out: list[SnapshotNode], depth: int, parent_name: str
    ) -> None:
        # Reversed so the first child is popped first and uids stay in document order.
        for child_id in reversed(ax.get("childIds") or []):
            child = self.by_id.get(str(child_id))
            if child is not None:
                stack.append(("visit", child, out, depth, parent_name))

    def _walk(self, top: dict[str, Any], out: list[SnapshotNode], *, parent_name: str) -> None:
        """Depth-first walk below `top`, appending converted nodes to `out`.

        A kept node gets its uid when first reached and is materialized by a
        "finish" entry once its whole subtree has been converted.
        """
        stack: list[tuple] = []
        self._push_children(stack, top, out, 1, parent_name)
        while stack:
            entry = stack.pop()
            if entry[0] == "finish":
                _, target, fields, kids = entry
                target.append(SnapshotNode(children=tuple(kids), **fields))
                continue

            _, ax, target, depth, parent_name = entry
            node_id = str(ax.get("nodeId"))
            if node_id in self._visited or depth > self.max_depth:
                continue
            self._visited.add(node_id)

            role = str(_ax_value(ax.get("role")) or "")
            if role in _DROP_SUBTREE_ROLES:
                continue
            props = _props(ax)
            if _truthy(props.get("hidden")):
                continue
            backend_id = _backend_id(ax)
            if backend_id in self.zero_size:
                continue
            if ax.get("ignored") is True:
                self._push_children(stack, ax, target, depth + 1, parent_name)
                continue

            name = _clean_text(_ax_value(ax.get("name")), self.name_limit)
            if role == "StaticText":
                if name and name != parent_name:
                    target.append(SnapshotNode(uid=self.allocator.next_uid(), role=role, name=name))
                continue

            editor = self.editors.get(backend_id) if backend_id else None
            if role in _COLLAPSIBLE_ROLES and not name and not editor and not _truthy(props.get("focusable")):
                self._push_children(stack, ax, target, depth + 1, parent_name)
                continue

            fields = {
                "uid": self.allocator.next_uid(),
                "role": role or "generic",
                "name": name,
                "backend_node_id": backend_id,
                "attributes": self._attributes(ax, role, props, editor),
            }
            kids: list[SnapshotNode] = []
            stack.append(("finish", target, fields, kids))
            self._push_children(stack, ax, kids, depth + 1, name)

    def _attributes(self, ax: dict[str, Any], role: str, props: dict[str, Any], editor: str | None) -> dict[str, Any]:
        attrs: dict[str, Any] = {}
        value = _ax_value(ax.get("value"))
        if role in _VALUE_ROLES and value not in (None, ""):
            attrs["value"] = _clean_text(value, self.name_limit)
        url = props.get("url")
        if isinstance(url, str) and url:
            attrs["url"] = url
        level = props.get("level")
        if isinstance(level, (int, float)) and level:
            attrs["level"] = int(level)
        for flag in _FLAG_PROPS:
            if flag in props and _truthy(props.get(flag)):
                attrs[flag] = True
        if "expanded" in props:
            attrs["expanded" if _truthy(props.get("expanded")) else "collapsed"] = True
        haspopup = props.get("hasPopup")
        if isinstance(haspopup, str) and haspopup not in {"", "false"}:
            attrs["haspopup"] = haspopup
        if editor:
            attrs["editor"] = editor
        return attrs


__all__ = ["EDITOR_OBJECT_GROUP", "SnapshotBuilder"]
