"""
Browser bridge: the engine's only door to the live browser.

Provides:
- TabInfo: active-tab description
- BrowserBridge: active-tab resolution, per-tab CDP connections, script execution
- is_restricted_url: pages where the browser refuses script injection
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote, urlsplit

from .cdp import CdpConnection, CdpError
from .config import SnapshotConfig
from .errors import NavigationRestricted, NoActiveTab
from .http_client import http_get_json

logger = logging.getLogger("mcp.page_snapshot.bridge")

_RESTRICTED_SCHEMES = {"chrome", "chrome-extension", "chrome-untrusted", "devtools", "edge", "view-source"}
_RESTRICTED_HOSTS = {"chromewebstore.google.com"}


def is_restricted_url(url: str) -> bool:
    """Return True for privileged pages where scripts cannot be injected."""
    raw = (url or "").strip()
    if not raw:
        return False
    try:
        parts = urlsplit(raw)
    except ValueError:
        return False
    scheme = parts.scheme.lower()
    if scheme in _RESTRICTED_SCHEMES:
        return True
    if scheme == "about":
        return raw.lower() not in {"about:blank", "about:srcdoc"}
    host = (parts.hostname or "").lower()
    if host in _RESTRICTED_HOSTS:
        return True
    return host == "chrome.google.com" and parts.path.startswith("/webstore")


@dataclass(frozen=True)
class TabInfo:
    id: str
    url: str = ""
    title: str = ""
    window_id: str | None = None
    status: str = "complete"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "url": self.url, "title": self.title, "windowId": self.window_id, "status": self.status}


class PageBridge(Protocol):
    """What the engine needs from a browser. The CDP bridge and test fakes implement it."""

    async def list_tabs(self) -> list[TabInfo]: ...

    async def get_active_tab(self) -> TabInfo: ...

    async def get_tab(self, tab_id: str) -> TabInfo | None: ...

    async def new_tab(self, url: str) -> TabInfo: ...

    async def send(
        self, tab_id: str, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None
    ) -> dict[str, Any]: ...

    async def execute_script(self, tab_id: str, function: str, args: list[Any] | None = None) -> Any: ...


def remote_value(result: dict[str, Any]) -> Any:
    """Unwrap a Runtime.RemoteObject returned by value; undefined/null map to None."""
    obj = result.get("result") if isinstance(result, dict) else None
    if not isinstance(obj, dict):
        return None
    if obj.get("type") == "undefined" or obj.get("subtype") == "null":
        return None
    return obj.get("value")


def raise_for_exception(result: dict[str, Any], *, what: str) -> None:
    details = result.get("exceptionDetails") if isinstance(result, dict) else None
    if not isinstance(details, dict):
        return
    exc = details.get("exception") if isinstance(details.get("exception"), dict) else {}
    message = exc.get("description") or details.get("text") or "script threw"
    raise CdpError(f"{what}: {message}")


class BrowserBridge:
    """CDP-backed implementation of PageBridge.

    Tabs are discovered through the DevTools HTTP endpoint; each tab gets one cached
    WebSocket connection. Chrome lists page targets most-recently-focused first, so the
    first page target is treated as the active tab.
    """

    def __init__(self, config: SnapshotConfig) -> None:
        self.config = config
        self._conns: dict[str, CdpConnection] = {}
        self._ws_urls: dict[str, str] = {}
        self._connect_lock = asyncio.Lock()

    async def _get_json(self, path: str, *, method: str = "GET") -> Any:
        url = f"{self.config.http_base}{path}"
        return await asyncio.to_thread(http_get_json, url, min(self.config.cdp_timeout, 5.0), method=method)

    async def list_tabs(self) -> list[TabInfo]:
        targets = await self._get_json("/json/list") or []
        tabs: list[TabInfo] = []
        for t in targets if isinstance(targets, list) else []:
            if not isinstance(t, dict) or t.get("type") != "page":
                continue
            tab_id = str(t.get("id") or "")
            if not tab_id:
                continue
            if isinstance(t.get("webSocketDebuggerUrl"), str):
                self._ws_urls[tab_id] = t["webSocketDebuggerUrl"]
            tabs.append(TabInfo(id=tab_id, url=str(t.get("url") or ""), title=str(t.get("title") or "")))
        live = {t.id for t in tabs}
        for gone in [tid for tid in self._conns if tid not in live]:
            await self._drop_connection(gone)
        return tabs

    async def get_active_tab(self) -> TabInfo:
        tabs = await self.list_tabs()
        if not tabs:
            raise NoActiveTab()
        return tabs[0]

    async def get_tab(self, tab_id: str) -> TabInfo | None:
        for tab in await self.list_tabs():
            if tab.id == tab_id:
                return tab
        return None

    async def new_tab(self, url: str) -> TabInfo:
        created = await self._get_json(f"/json/new?{quote(url, safe='')}", method="PUT")
        if not isinstance(created, dict) or not created.get("id"):
            raise CdpError("Failed to create browser tab")
        if isinstance(created.get("webSocketDebuggerUrl"), str):
            self._ws_urls[str(created["id"])] = created["webSocketDebuggerUrl"]
        return TabInfo(id=str(created["id"]), url=str(created.get("url") or url), title=str(created.get("title") or ""))

    async def _connection(self, tab_id: str) -> CdpConnection:
        conn = self._conns.get(tab_id)
        if conn is not None and conn.connected:
            return conn
        async with self._connect_lock:
            conn = self._conns.get(tab_id)
            if conn is not None and conn.connected:
                return conn
            ws_url = self._ws_urls.get(tab_id)
            if ws_url is None:
                await self.list_tabs()
                ws_url = self._ws_urls.get(tab_id)
            if ws_url is None:
                raise NoActiveTab(f"Tab {tab_id} not found")
            conn = await CdpConnection(ws_url, timeout=self.config.cdp_timeout).connect()
            with contextlib.suppress(CdpError):
                await conn.send("DOM.enable")
            self._conns[tab_id] = conn
            logger.debug("cdp connected tab=%s", tab_id)
            return conn

    async def _drop_connection(self, tab_id: str) -> None:
        conn = self._conns.pop(tab_id, None)
        self._ws_urls.pop(tab_id, None)
        if conn is not None:
            await conn.close()

    async def send(
        self, tab_id: str, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None
    ) -> dict[str, Any]:
        conn = await self._connection(tab_id)
        return await conn.send(method, params, timeout=timeout)

    async def execute_script(self, tab_id: str, function: str, args: list[Any] | None = None) -> Any:
        """Run a JS function declaration in the tab's main world and return its JSON value."""
        tab = await self.get_tab(tab_id)
        if tab is not None and is_restricted_url(tab.url):
            raise NavigationRestricted(tab.url)

        arg_list = ", ".join(json.dumps(a) for a in (args or []))
        res = await self.send(
            tab_id,
            "Runtime.evaluate",
            {
                "expression": f"({function})({arg_list})",
                "returnByValue": True,
                "awaitPromise": True,
            },
        )
        raise_for_exception(res, what="execute_script")
        return remote_value(res)

    async def close(self) -> None:
        for tab_id in list(self._conns):
            with contextlib.suppress(Exception):
                await self._drop_connection(tab_id)


__all__ = [
    "BrowserBridge",
    "PageBridge",
    "TabInfo",
    "is_restricted_url",
    "raise_for_exception",
    "remote_value",
]
