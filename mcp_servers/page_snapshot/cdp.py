"""Low-level asyncio CDP connection over a WebSocket."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any

import websockets

logger = logging.getLogger("mcp.page_snapshot.cdp")


class CdpError(Exception):
    """CDP transport failure or protocol error reply."""

    def __init__(self, message: str, *, method: str | None = None, code: int | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.code = code


class CdpConnection:
    """One WebSocket to one CDP target.

    Commands are matched to replies by id on a single reader task. No domains are
    enabled, so events are not expected and are discarded.
    """

    def __init__(self, ws_url: str, timeout: float = 8.0) -> None:
        self.ws_url = ws_url
        self.timeout = float(timeout)
        self._ws: Any | None = None
        self._reader: asyncio.Task | None = None
        self._next_id = 1
        self._pending: dict[int, asyncio.Future] = {}
        self._closed = False

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._closed

    async def connect(self) -> CdpConnection:
        try:
            self._ws = await asyncio.wait_for(
                websockets.connect(self.ws_url, max_size=None, ping_interval=None),
                timeout=self.timeout,
            )
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as exc:
            raise CdpError(f"CDP connect failed: {exc}") from exc
        self._reader = asyncio.create_task(self._read_loop(), name=f"cdp-reader:{self.ws_url}")
        return self

    async def _read_loop(self) -> None:
        assert self._ws is not None
        try:
            async for raw in self._ws:
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                if not isinstance(data, dict):
                    continue
                msg_id = data.get("id")
                if msg_id is None:
                    continue
                fut = self._pending.pop(msg_id, None)
                if fut is not None and not fut.done():
                    fut.set_result(data)
        except websockets.exceptions.ConnectionClosed as exc:
            logger.debug("cdp connection closed: %s", exc)
        finally:
            self._closed = True
            self._fail_pending(CdpError("CDP connection closed"))

    def _fail_pending(self, exc: Exception) -> None:
        pending, self._pending = self._pending, {}
        for fut in pending.values():
            if not fut.done():
                fut.set_exception(exc)

    async def send(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Send a CDP command and wait for its result."""
        if not self.connected:
            raise CdpError("CDP connection is not open", method=method)

        msg_id = self._next_id
        self._next_id += 1
        msg: dict[str, Any] = {"id": msg_id, "method": method}
        if params:
            msg["params"] = params

        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[msg_id] = fut
        try:
            await self._ws.send(json.dumps(msg))
            reply = await asyncio.wait_for(fut, timeout=timeout if timeout is not None else self.timeout)
        except asyncio.TimeoutError as exc:
            raise CdpError(f"CDP response timed out ({method})", method=method) from exc
        except websockets.exceptions.ConnectionClosed as exc:
            raise CdpError(f"CDP connection closed ({method})", method=method) from exc
        finally:
            self._pending.pop(msg_id, None)

        err = reply.get("error")
        if err:
            message = err.get("message") if isinstance(err, dict) else str(err)
            code = err.get("code") if isinstance(err, dict) else None
            raise CdpError(str(message or err), method=method, code=code)
        result = reply.get("result")
        return result if isinstance(result, dict) else {}

    async def close(self) -> None:
        self._closed = True
        ws, self._ws = self._ws, None
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close()
        reader, self._reader = self._reader, None
        if reader is not None and not reader.done():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await reader
        self._fail_pending(CdpError("CDP connection closed"))


__all__ = ["CdpConnection", "CdpError"]
