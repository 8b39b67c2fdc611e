from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import pytest

from mcp_servers.page_snapshot import cdp
from mcp_servers.page_snapshot.cdp import CdpConnection, CdpError


class FakeWebSocket:
    def __init__(self, responder: Callable[[dict[str, Any]], dict[str, Any] | None]) -> None:
        self.responder = responder
        self.sent: list[dict[str, Any]] = []
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def send(self, raw: str) -> None:
        msg = json.loads(raw)
        self.sent.append(msg)
        reply = self.responder(msg)
        if reply is not None:
            await self._inbox.put(json.dumps(reply))

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> str:
        raw = await self._inbox.get()
        if raw is None:
            raise StopAsyncIteration
        return raw

    async def close(self) -> None:
        await self._inbox.put(None)


def _responder(msg: dict[str, Any]) -> dict[str, Any] | None:
    if msg["method"] == "Runtime.evaluate":
        return {"id": msg["id"], "result": {"result": {"type": "number", "value": 2}}}
    if msg["method"] == "DOM.resolveNode":
        return {"id": msg["id"], "error": {"code": -32000, "message": "No node with given id found"}}
    return None


async def _connect(monkeypatch) -> tuple[CdpConnection, FakeWebSocket]:  # noqa: ANN001
    ws = FakeWebSocket(_responder)

    async def fake_connect(url: str, **kwargs: Any) -> FakeWebSocket:  # noqa: ARG001
        return ws

    monkeypatch.setattr(cdp.websockets, "connect", fake_connect)
    conn = await CdpConnection("ws://127.0.0.1:9222/devtools/page/X", timeout=1.0).connect()
    return conn, ws


def test_send_matches_replies_by_id(monkeypatch) -> None:  # noqa: ANN001
    async def _main() -> None:
        conn, ws = await _connect(monkeypatch)
        await ws._inbox.put(json.dumps({"method": "Page.loadEventFired", "params": {}}))
        res = await conn.send("Runtime.evaluate", {"expression": "1+1"})
        assert res == {"result": {"type": "number", "value": 2}}
        assert ws.sent[0] == {"id": 1, "method": "Runtime.evaluate", "params": {"expression": "1+1"}}
        await conn.close()
        assert not conn.connected

    asyncio.run(_main())


def test_error_reply_and_timeout(monkeypatch) -> None:  # noqa: ANN001
    async def _main() -> None:
        conn, _ws = await _connect(monkeypatch)
        with pytest.raises(CdpError) as exc:
            await conn.send("DOM.resolveNode", {"backendNodeId": 9})
        assert exc.value.code == -32000
        assert exc.value.method == "DOM.resolveNode"

        with pytest.raises(CdpError, match="timed out"):
            await conn.send("Page.enable", timeout=0.05)
        await conn.close()

        with pytest.raises(CdpError):
            await conn.send("Runtime.evaluate")

    asyncio.run(_main())
