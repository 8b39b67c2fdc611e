"""
Tool handlers organized by domain.

All handlers follow the signature: async (ctx, arguments) -> ToolResult
"""

from .element import ELEMENT_HANDLERS
from .page import PAGE_HANDLERS
from .snapshot import SNAPSHOT_HANDLERS

ALL_HANDLERS: dict = {
    **PAGE_HANDLERS,
    **SNAPSHOT_HANDLERS,
    **ELEMENT_HANDLERS,
}

__all__ = ["ALL_HANDLERS", "ELEMENT_HANDLERS", "PAGE_HANDLERS", "SNAPSHOT_HANDLERS"]
