"""
Tool registry with dispatch table for the MCP server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .types import HandlerFunc, ToolResult

if TYPE_CHECKING:
    from ..tools.base import ToolContext

logger = logging.getLogger("mcp.page_snapshot.registry")


class ToolRegistry:
    """Registry for async tool handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, HandlerFunc] = {}

    def register(self, name: str, handler: HandlerFunc) -> None:
        self._handlers[name] = handler

    def register_many(self, handlers: dict[str, HandlerFunc]) -> None:
        self._handlers.update(handlers)

    def has(self, name: str) -> bool:
        return name in self._handlers

    async def dispatch(self, name: str, ctx: ToolContext, arguments: dict[str, Any]) -> ToolResult:
        """Dispatch tool call to its handler. Raises KeyError for unknown tools."""
        handler = self._handlers.get(name)
        if handler is None:
            raise KeyError(f"Unknown tool: {name}")
        return await handler(ctx, arguments)

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers.keys())

    def __len__(self) -> int:
        return len(self._handlers)


def create_default_registry() -> ToolRegistry:
    from .handlers import ALL_HANDLERS

    registry = ToolRegistry()
    registry.register_many(ALL_HANDLERS)
    logger.info("Registered %d tool handlers", len(registry))
    return registry


__all__ = ["HandlerFunc", "ToolRegistry", "create_default_registry", "logger"]
