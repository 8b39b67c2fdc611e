"""In-memory PageBridge used by the tests.

Answers the CDP methods the snapshot engine sends (AX tree, page scan,
resolveNode/callFunctionOn, box model, mouse input) from a small page model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from mcp_servers.page_snapshot import js_helpers as js
from mcp_servers.page_snapshot.bridge import TabInfo
from mcp_servers.page_snapshot.cdp import CdpError

DEMO_URL = "https://example.test/settings"
DEFAULT_QUAD = [10.0, 20.0, 110.0, 20.0, 110.0, 60.0, 10.0, 60.0]


@dataclass
class FakeElement:
    tag: str = "div"
    value: str = ""
    disabled: bool = False
    connected: bool = True
    quad: list[float] | None = field(default_factory=lambda: list(DEFAULT_QUAD))
    editor: str | None = None
    editor_value: str | None = None
    editor_throws: str | None = None


@dataclass
class FakePage:
    nodes: list[dict[str, Any]]
    elements: dict[int, FakeElement]
    inject_denied: bool = False


def ax(
    node_id: int,
    role: str,
    name: str = "",
    *,
    backend: int | None = None,
    children: tuple[int, ...] = (),
    props: dict[str, Any] | None = None,
    ignored: bool = False,
    value: Any = None,
) -> dict[str, Any]:
    node: dict[str, Any] = {
        "nodeId": str(node_id),
        "ignored": ignored,
        "role": {"type": "role", "value": role},
        "name": {"type": "computedString", "value": name},
        "childIds": [str(c) for c in children],
        "properties": [{"name": k, "value": {"type": "generic", "value": v}} for k, v in (props or {}).items()],
    }
    if backend is not None:
        node["backendDOMNodeId"] = backend
    if value is not None:
        node["value"] = {"type": "string", "value": value}
    return node


def link(nodes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Fill parentId from childIds, like Chrome does."""
    by_id = {n["nodeId"]: n for n in nodes}
    for n in nodes:
        for child_id in n.get("childIds") or []:
            if child_id in by_id:
                by_id[child_id]["parentId"] = n["nodeId"]
    return nodes


def demo_page() -> FakePage:
    """Settings page. Pre-order uids: e1 root, e2 heading, e3 Save, e4 Username,
    e5 Code (monaco), e6 Remember me, e7 Submit, e8 Login help, e9 Welcome back."""
    nodes = link(
        [
            ax(1, "RootWebArea", "Demo page", backend=1, children=(2, 3, 4, 5, 9, 10, 12, 13)),
            ax(2, "heading", "Settings", backend=2, children=(20,), props={"level": 1}),
            ax(20, "StaticText", "Settings", children=(21,)),
            ax(21, "InlineTextBox", "Settings"),
            ax(3, "button", "Save", backend=3, props={"focusable": True}),
            ax(4, "generic", backend=4, children=(6, 7)),
            ax(6, "textbox", "Username", backend=6, value="alice", props={"focusable": True}),
            ax(7, "textbox", "Code", backend=7, props={"focusable": True}),
            ax(5, "none", ignored=True, children=(8,)),
            ax(8, "checkbox", "Remember me", backend=8, props={"checked": "true", "focusable": True}),
            ax(9, "button", "Submit", backend=9),
            ax(10, "link", "Login help", backend=10, props={"url": "https://example.test/help"}),
            ax(12, "button", "Ghost", backend=12, props={"hidden": True}),
            ax(13, "StaticText", "Welcome back"),
        ]
    )
    elements = {
        1: FakeElement(tag="html"),
        2: FakeElement(tag="h1"),
        3: FakeElement(tag="button"),
        4: FakeElement(tag="div"),
        6: FakeElement(tag="input", value="alice"),
        7: FakeElement(tag="textarea", editor="monaco", editor_value="print('hi')\n"),
        8: FakeElement(tag="input"),
        9: FakeElement(tag="button"),
        10: FakeElement(tag="a"),
        12: FakeElement(tag="button"),
    }
    return FakePage(nodes=nodes, elements=elements)


def _remote(value: Any) -> dict[str, Any]:
    if value is None:
        return {"result": {"type": "object", "subtype": "null", "value": None}}
    if isinstance(value, bool):
        return {"result": {"type": "boolean", "value": value}}
    if isinstance(value, str):
        return {"result": {"type": "string", "value": value}}
    return {"result": {"type": "object", "value": value}}


_EDITOR_READERS = {
    js.READ_MONACO_JS: "monaco",
    js.READ_CODEMIRROR_JS: "codemirror",
    js.READ_ACE_JS: "ace",
}


class FakeBrowser:
    def __init__(self, tabs: list[TabInfo] | None = None, pages: dict[str, FakePage] | None = None) -> None:
        if tabs is None:
            tabs = [TabInfo(id="t1", url=DEMO_URL, title="Demo page")]
        self.tabs = list(tabs)
        self.pages = pages if pages is not None else {t.id: demo_page() for t in self.tabs}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.scripts: list[tuple[str, str, list[Any]]] = []
        self.script_handler: Callable[[str, list[Any]], Any] = lambda _fn, _args: None
        self._created = 0

    # PageBridge

    async def list_tabs(self) -> list[TabInfo]:
        return list(self.tabs)

    async def get_active_tab(self) -> TabInfo:
        from mcp_servers.page_snapshot.errors import NoActiveTab

        if not self.tabs:
            raise NoActiveTab()
        return self.tabs[0]

    async def get_tab(self, tab_id: str) -> TabInfo | None:
        return next((t for t in self.tabs if t.id == tab_id), None)

    async def new_tab(self, url: str) -> TabInfo:
        self._created += 1
        tab = TabInfo(id=f"new{self._created}", url=url, title="")
        self.tabs.insert(0, tab)
        self.pages[tab.id] = FakePage(nodes=link([ax(1, "RootWebArea", "", backend=1)]), elements={})
        return tab

    async def execute_script(self, tab_id: str, function: str, args: list[Any] | None = None) -> Any:
        self.scripts.append((tab_id, function, list(args or [])))
        return self.script_handler(function, list(args or []))

    async def send(
        self, tab_id: str, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None
    ) -> dict[str, Any]:
        params = params or {}
        self.calls.append((tab_id, method, params))
        page = self.pages.get(tab_id)
        if page is None:
            raise CdpError(f"No target with given id {tab_id}", method=method)
        handler = getattr(self, "_" + method.replace(".", "_"), None)
        if handler is None:
            return {}
        return handler(page, params)

    # helpers for assertions

    def methods(self, name: str) -> list[dict[str, Any]]:
        return [p for (_tab, m, p) in self.calls if m == name]

    # CDP emulation

    def _Accessibility_getFullAXTree(self, page: FakePage, params: dict[str, Any]) -> dict[str, Any]:
        return {"nodes": page.nodes}

    def _Runtime_evaluate(self, page: FakePage, params: dict[str, Any]) -> dict[str, Any]:
        if page.inject_denied:
            raise CdpError("Cannot access contents of the page", method="Runtime.evaluate")
        return {"result": {"type": "object", "subtype": "array", "objectId": "editor-scan"}}

    def _Runtime_getProperties(self, page: FakePage, params: dict[str, Any]) -> dict[str, Any]:
        props: list[dict[str, Any]] = []
        if params.get("objectId") == "editor-scan":
            marked = [(bid, el.editor) for bid, el in page.elements.items() if el.editor]
            marked += [
                (bid, js.ZERO_SIZE_MARK)
                for bid, el in page.elements.items()
                if not el.editor and el.quad is not None and not any(el.quad)
            ]
            for i, (bid, mark) in enumerate(marked):
                props.append({"name": str(2 * i), "value": {"type": "object", "objectId": f"obj-{bid}"}})
                props.append({"name": str(2 * i + 1), "value": {"type": "string", "value": mark}})
            props.append({"name": "length", "value": {"type": "number", "value": 2 * len(marked)}})
        return {"result": props}

    def _element(self, page: FakePage, object_id: Any) -> tuple[int, FakeElement]:
        if isinstance(object_id, str) and object_id.startswith("obj-"):
            bid = int(object_id[4:])
            if bid in page.elements:
                return bid, page.elements[bid]
        raise CdpError("Could not find object with given id")

    def _DOM_describeNode(self, page: FakePage, params: dict[str, Any]) -> dict[str, Any]:
        bid, el = self._element(page, params.get("objectId"))
        return {"node": {"backendNodeId": bid, "nodeName": el.tag.upper()}}

    def _DOM_resolveNode(self, page: FakePage, params: dict[str, Any]) -> dict[str, Any]:
        bid = params.get("backendNodeId")
        if bid not in page.elements:
            raise CdpError("No node with given id found", method="DOM.resolveNode", code=-32000)
        return {"object": {"type": "object", "subtype": "node", "objectId": f"obj-{bid}"}}

    def _DOM_getBoxModel(self, page: FakePage, params: dict[str, Any]) -> dict[str, Any]:
        el = page.elements.get(params.get("backendNodeId"))
        if el is None or el.quad is None:
            raise CdpError("Could not compute box model.", method="DOM.getBoxModel")
        return {"model": {"border": list(el.quad), "content": list(el.quad)}}

    def _Runtime_callFunctionOn(self, page: FakePage, params: dict[str, Any]) -> dict[str, Any]:
        _bid, el = self._element(page, params.get("objectId"))
        fn = params.get("functionDeclaration")
        args = [a.get("value") for a in params.get("arguments") or []]

        if fn == js.IS_CONNECTED_JS:
            return _remote(el.connected)
        if fn == js.FILL_JS:
            if el.tag not in {"input", "textarea", "select"}:
                return _remote({"ok": False, "reason": "not_input", "tag": el.tag})
            if el.disabled:
                return _remote({"ok": False, "reason": "disabled", "tag": el.tag})
            el.value = str(args[0])
            return _remote({"ok": True, "tag": el.tag})
        if fn in _EDITOR_READERS:
            kind = _EDITOR_READERS[fn]
            if el.editor_throws == kind:
                return {
                    "result": {"type": "object", "subtype": "error"},
                    "exceptionDetails": {"text": "Uncaught", "exception": {"description": "TypeError: boom"}},
                }
            return _remote(el.editor_value if el.editor == kind else None)
        if fn == js.READ_PLAIN_INPUT_JS:
            return _remote(el.value if el.tag in {"input", "textarea", "select"} else None)
        return _remote(None)


__all__ = ["DEMO_URL", "FakeBrowser", "FakeElement", "FakePage", "ax", "demo_page", "link"]
