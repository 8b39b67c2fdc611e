"""
Editor adapters for reading the in-memory buffer of rich text/code editors.

Each adapter runs one function on the resolved element and returns the text,
or None when the element does not belong to that editor. The first adapter
that returns text wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .bridge import raise_for_exception, remote_value
from .js_helpers import READ_ACE_JS, READ_CODEMIRROR_JS, READ_MONACO_JS, READ_PLAIN_INPUT_JS

if TYPE_CHECKING:
    from .bridge import PageBridge


class EditorAdapter:
    kind: str = ""
    function_declaration: str = ""

    async def read_value(self, bridge: PageBridge, tab_id: str, object_id: str) -> str | None:
        res = await bridge.send(
            tab_id,
            "Runtime.callFunctionOn",
            {
                "objectId": object_id,
                "functionDeclaration": self.function_declaration,
                "returnByValue": True,
                "awaitPromise": True,
            },
        )
        raise_for_exception(res, what=f"{self.kind} editor read")
        value = remote_value(res)
        return value if isinstance(value, str) else None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind!r}>"


class MonacoAdapter(EditorAdapter):
    kind = "monaco"
    function_declaration = READ_MONACO_JS


class CodeMirrorAdapter(EditorAdapter):
    kind = "codemirror"
    function_declaration = READ_CODEMIRROR_JS


class AceAdapter(EditorAdapter):
    kind = "ace"
    function_declaration = READ_ACE_JS


class PlainInputAdapter(EditorAdapter):
    kind = "input"
    function_declaration = READ_PLAIN_INPUT_JS


# Rich editors first: Monaco/ACE hide a real <textarea> that would otherwise
# satisfy the plain input adapter with an empty or partial value.
DEFAULT_EDITOR_CHAIN: tuple[EditorAdapter, ...] = (
    MonacoAdapter(),
    CodeMirrorAdapter(),
    AceAdapter(),
    PlainInputAdapter(),
)


def adapter_chain(preferred_kind: str | None = None) -> tuple[EditorAdapter, ...]:
    """Detection order, with the snapshot's recorded editor kind tried first."""
    if not preferred_kind:
        return DEFAULT_EDITOR_CHAIN
    head = [a for a in DEFAULT_EDITOR_CHAIN if a.kind == preferred_kind]
    return tuple(head + [a for a in DEFAULT_EDITOR_CHAIN if a.kind != preferred_kind])


__all__ = [
    "AceAdapter",
    "CodeMirrorAdapter",
    "DEFAULT_EDITOR_CHAIN",
    "EditorAdapter",
    "MonacoAdapter",
    "PlainInputAdapter",
    "adapter_chain",
]
