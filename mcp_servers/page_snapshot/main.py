"""
MCP server exposing accessibility snapshots and uid-addressed actions.

This module provides the main entry point and protocol handling.
Tool dispatch is handled via registry pattern in server/registry.py.
Tool calls run as concurrent asyncio tasks; initialize/list/ping answer inline.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from typing import Any

from .bridge import BrowserBridge, PageBridge
from .cdp import CdpError
from .config import SnapshotConfig
from .errors import SmartToolError
from .http_client import HttpClientError
from .server.contract import initialize_result, select_protocol, tools_list
from .server.redaction import redact_tool_arguments
from .server.registry import ToolRegistry, create_default_registry
from .server.types import ToolResult
from .tools.base import ToolContext

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("mcp.page_snapshot")

__all__ = ["McpServer", "main"]


def _write_message(payload: dict[str, Any]) -> None:
    """Write JSON-RPC message to stdout."""
    line = (json.dumps(payload, ensure_ascii=False) + "\n").encode()
    sys.stdout.buffer.write(line)
    sys.stdout.buffer.flush()


def _parse_message(line: bytes) -> Any:
    line = line.strip()
    if not line:
        return None
    msg = json.loads(line.decode())
    if os.environ.get("MCP_TRACE") and isinstance(msg, dict):
        logger.info("recv method=%s id=%s", msg.get("method"), msg.get("id"))
    return msg


class McpServer:
    """MCP Server with registry-based tool dispatch."""

    def __init__(
        self,
        config: SnapshotConfig | None = None,
        bridge: PageBridge | None = None,
        registry: ToolRegistry | None = None,
        write=_write_message,
    ) -> None:
        self.config = config or SnapshotConfig.from_env()
        self.bridge = bridge or BrowserBridge(self.config)
        self.ctx = ToolContext.create(self.config, self.bridge)
        self.registry = registry or create_default_registry()
        self._write = write
        self._tasks: set[asyncio.Task] = set()

    def handle_initialize(self, request_id: Any, params: dict[str, Any] | None = None) -> None:
        requested = (params or {}).get("protocolVersion") if isinstance(params, dict) else None
        protocol = select_protocol(requested)
        self._write({"jsonrpc": "2.0", "id": request_id, "result": initialize_result(protocol)})

    def handle_list_tools(self, request_id: Any) -> None:
        self._write({"jsonrpc": "2.0", "id": request_id, "result": {"tools": tools_list()}})

    def _log_call(self, name: str, arguments: dict[str, Any]) -> None:
        """Log tool call with sanitized arguments."""
        logger.info("tool=%s args=%s", name, redact_tool_arguments(name, arguments))

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Run one tool and map failures to an error result."""
        self._log_call(name, arguments)
        try:
            if not name:
                return ToolResult.error("Missing tool name")
            if not self.registry.has(name):
                return ToolResult.error(f"Unknown tool: {name}", tool=name)
            return await self.registry.dispatch(name, self.ctx, arguments)
        except SmartToolError as e:
            logger.info("tool_error tool=%s action=%s reason=%s", e.tool, e.action, e.reason)
            return ToolResult.error(
                e.reason, tool=e.tool, suggestion=e.suggestion, details=e.details, kind=type(e).__name__
            )
        except (CdpError, HttpClientError) as e:
            logger.info("browser_error tool=%s %s", name, e)
            return ToolResult.error(str(e), tool=name, kind=type(e).__name__)
        except (KeyError, TypeError, ValueError) as e:
            logger.info("bad_arguments tool=%s %s", name, e)
            return ToolResult.error(f"Invalid arguments: {e}", tool=name, kind="InvalidArguments")
        except Exception as exc:
            logger.exception("tool_call_failed")
            return ToolResult.error(str(exc), tool=name)

    async def handle_call_tool(self, request_id: Any, name: str, arguments: dict[str, Any]) -> None:
        result = await self.call_tool(name, arguments)
        self._write(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"content": result.to_content_list(), "isError": result.is_error},
            }
        )

    def _reject(self, request_id: Any, code: int, message: str) -> None:
        logger.warning("rejected_message code=%s %s", code, message)
        self._write({"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}})

    def dispatch(self, message: Any) -> asyncio.Task | None:
        """Dispatch incoming JSON-RPC message. Tool calls are scheduled, not awaited."""
        if not isinstance(message, dict):
            self._reject(None, -32600, "Invalid Request: expected a JSON object")
            return None
        if not message:
            return None

        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params") or {}
        if not isinstance(params, dict):
            self._reject(request_id, -32602, "Invalid params: expected a JSON object")
            return None

        if method == "initialize":
            self.handle_initialize(request_id, params)
        elif method == "notifications/initialized":
            return None
        elif method in ("tools/list", "list_tools"):
            self.handle_list_tools(request_id)
        elif method in ("tools/call", "call_tool"):
            name = params.get("name")
            arguments = params.get("arguments") or params.get("args") or {}
            if not isinstance(arguments, dict):
                self._reject(request_id, -32602, "Invalid params: tool arguments must be a JSON object")
                return None
            task = asyncio.get_running_loop().create_task(self.handle_call_tool(request_id, name or "", arguments))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return task
        elif method == "ping":
            self._write({"jsonrpc": "2.0", "id": request_id, "result": {}})
        elif request_id is not None:
            self._write(
                {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": -32601, "message": f"Method {method} not found"},
                }
            )
        return None

    async def drain(self) -> None:
        """Wait for in-flight tool calls."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        close = getattr(self.bridge, "close", None)
        if close is not None:
            await close()

    async def serve(self) -> None:
        """Read JSON-RPC lines from stdin until EOF."""
        loop = asyncio.get_running_loop()
        try:
            while True:
                line = await loop.run_in_executor(None, sys.stdin.buffer.readline)
                if not line:
                    break
                try:
                    message = _parse_message(line)
                except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                    logger.warning("invalid_message: %s", exc)
                    self._write({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}})
                    continue
                if message is not None:
                    self.dispatch(message)
        finally:
            await self.close()


def main() -> None:
    """Main entry point for MCP server."""
    config = SnapshotConfig.from_env()
    logger.info("page_snapshot starting cdp=%s", config.http_base)
    asyncio.run(McpServer(config).serve())


if __name__ == "__main__":
    main()
