"""
Element handles and locators.

An ElementHandle ties a snapshot node to its backend DOM node id. Every action
re-resolves the live element from that id at call time, because the page may
have re-rendered since the snapshot; the snapshot-time reference is never
trusted. Remote objects acquired along the way are released by dispose().
"""

from __future__ import annotations

import contextlib
import itertools
import logging
from typing import Any

from .bridge import PageBridge, raise_for_exception, remote_value
from .cdp import CdpError
from .editors import adapter_chain
from .errors import ElementDetached, ElementNotActionable, NotAnInputField
from .js_helpers import FILL_JS, IS_CONNECTED_JS
from .model import SnapshotNode

logger = logging.getLogger("mcp.page_snapshot.locator")

_handle_seq = itertools.count(1)


class ElementHandle:
    """Resolved reference to one snapshot node. Owned by the caller; dispose once.

    dispose() is safe to call again (no-op), so it can sit in a finally block or
    be driven by `async with`.
    """

    def __init__(self, bridge: PageBridge, tab_id: str, node: SnapshotNode, backend_node_id: int) -> None:
        self.bridge = bridge
        self.tab_id = tab_id
        self.node = node
        self.backend_node_id = int(backend_node_id)
        self.object_group = f"page-snapshot-handle-{next(_handle_seq)}"
        self._acquired = 0
        self._disposed = False

    @property
    def uid(self) -> str:
        return self.node.uid

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __repr__(self) -> str:
        return f"<ElementHandle tab={self.tab_id} uid={self.uid} backend={self.backend_node_id}>"

    def as_locator(self) -> Locator:
        return Locator(self)

    async def relocate(self) -> str:
        """Resolve the live element now. Returns a remote object id owned by this handle."""
        if self._disposed:
            raise RuntimeError(f"{self!r} used after dispose()")
        try:
            res = await self.bridge.send(
                self.tab_id,
                "DOM.resolveNode",
                {"backendNodeId": self.backend_node_id, "objectGroup": self.object_group},
            )
        except CdpError as exc:
            raise ElementDetached(self.uid, self.backend_node_id, reason=f"Node cannot be resolved: {exc}") from exc

        obj = res.get("object") if isinstance(res, dict) else None
        object_id = obj.get("objectId") if isinstance(obj, dict) else None
        if not isinstance(object_id, str) or not object_id:
            raise ElementDetached(self.uid, self.backend_node_id)
        self._acquired += 1

        if not await self.call(object_id, IS_CONNECTED_JS):
            raise ElementDetached(self.uid, self.backend_node_id)
        return object_id

    async def call(self, object_id: str, function_declaration: str, *args: Any) -> Any:
        """Run a function with the element as `this`; returns its JSON value."""
        try:
            res = await self.bridge.send(
                self.tab_id,
                "Runtime.callFunctionOn",
                {
                    "objectId": object_id,
                    "functionDeclaration": function_declaration,
                    "arguments": [{"value": a} for a in args],
                    "returnByValue": True,
                    "awaitPromise": True,
                },
            )
        except CdpError as exc:
            raise ElementDetached(self.uid, self.backend_node_id, reason=str(exc)) from exc
        raise_for_exception(res, what=f"call on {self.uid}")
        return remote_value(res)

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self._acquired:
            with contextlib.suppress(Exception):
                await self.bridge.send(self.tab_id, "Runtime.releaseObjectGroup", {"objectGroup": self.object_group})
        logger.debug("handle disposed uid=%s acquired=%d", self.uid, self._acquired)

    async def __aenter__(self) -> ElementHandle:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.dispose()


class Locator:
    """Action view over an ElementHandle; lives as long as the handle."""

    def __init__(self, handle: ElementHandle) -> None:
        self.handle = handle

    @property
    def uid(self) -> str:
        return self.handle.uid

    async def _center(self, action: str) -> tuple[float, float]:
        h = self.handle
        with contextlib.suppress(CdpError):
            await h.bridge.send(h.tab_id, "DOM.scrollIntoViewIfNeeded", {"backendNodeId": h.backend_node_id})

        try:
            box = await h.bridge.send(h.tab_id, "DOM.getBoxModel", {"backendNodeId": h.backend_node_id})
        except CdpError as exc:
            raise ElementNotActionable(h.uid, action, f"Element has no layout box ({exc})") from exc

        model = box.get("model") if isinstance(box, dict) else None
        quad = None
        if isinstance(model, dict):
            quad = model.get("border") or model.get("content") or model.get("padding")
        if not isinstance(quad, list) or len(quad) < 8:
            raise ElementNotActionable(h.uid, action, "Missing box model quad for element")

        xs = [float(quad[i]) for i in (0, 2, 4, 6)]
        ys = [float(quad[i]) for i in (1, 3, 5, 7)]
        if max(xs) - min(xs) <= 0 or max(ys) - min(ys) <= 0:
            raise ElementNotActionable(h.uid, action, "Element has zero size")
        return sum(xs) / 4.0, sum(ys) / 4.0

    async def _mouse(self, kind: str, x: float, y: float, *, button: str = "none", click_count: int = 0) -> None:
        h = self.handle
        await h.bridge.send(
            h.tab_id,
            "Input.dispatchMouseEvent",
            {"type": kind, "x": x, "y": y, "button": button, "clickCount": click_count},
        )

    async def click(self, *, count: int = 1, button: str = "left") -> dict[str, Any]:
        """Single or multi click at the element's center."""
        if button not in {"left", "right", "middle"}:
            raise ValueError(f"Invalid mouse button: {button}")
        count = max(1, min(int(count), 3))
        await self.handle.relocate()
        x, y = await self._center("click")
        await self._mouse("mouseMoved", x, y)
        for n in range(1, count + 1):
            await self._mouse("mousePressed", x, y, button=button, click_count=n)
            await self._mouse("mouseReleased", x, y, button=button, click_count=n)
        return {"x": x, "y": y, "button": button, "clickCount": count}

    async def hover(self) -> dict[str, Any]:
        await self.handle.relocate()
        x, y = await self._center("hover")
        await self._mouse("mouseMoved", x, y)
        return {"x": x, "y": y}

    async def fill(self, value: str) -> dict[str, Any]:
        """Set the control's value and fire input/change so page listeners see it."""
        h = self.handle
        object_id = await h.relocate()
        res = await h.call(object_id, FILL_JS, str(value))
        if not isinstance(res, dict) or not res.get("ok"):
            reason = res.get("reason") if isinstance(res, dict) else None
            if reason == "disabled":
                raise ElementNotActionable(h.uid, "fill", "Input is disabled or read-only")
            raise NotAnInputField(h.uid, h.node.role)
        return {"tag": res.get("tag"), "length": len(str(value))}

    async def get_editor_value(self) -> str | None:
        """Text of a Monaco/CodeMirror/ACE editor or plain input; None if neither."""
        h = self.handle
        object_id = await h.relocate()
        for adapter in adapter_chain(h.node.attributes.get("editor")):
            try:
                value = await adapter.read_value(h.bridge, h.tab_id, object_id)
            except CdpError as exc:
                logger.debug("editor adapter %s failed uid=%s: %s", adapter.kind, h.uid, exc)
                continue
            if value is not None:
                return value
        return None


__all__ = ["ElementHandle", "Locator"]
