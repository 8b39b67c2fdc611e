"""Redaction of tool arguments for logging.

Filled values and anything under a secret-looking key are replaced by a
length summary; the rest is logged as-is.
"""

from __future__ import annotations

from typing import Any

_SENSITIVE_KEYS = {
    "secret",
    "password",
    "pass",
    "pwd",
    "token",
    "auth",
    "authorization",
    "cookie",
    "api-key",
    "api_key",
}

# tool name -> argument keys whose values are user content
_TOOL_VALUE_KEYS: dict[str, set[str]] = {
    "fill_element_by_uid": {"value"},
    "fill_form_field": {"value"},
}


def _redacted_summary(value: Any) -> str:
    if value is None:
        return "<redacted>"
    if isinstance(value, str):
        return f"<redacted str len={len(value)}>"
    if isinstance(value, (list, tuple, set)):
        return f"<redacted list len={len(value)}>"
    if isinstance(value, dict):
        return f"<redacted dict keys={len(value)}>"
    return "<redacted>"


def _redact_any(value: Any, *, tool: str, key: str | None) -> Any:
    if isinstance(value, dict):
        return {k: _redact_any(v, tool=tool, key=str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact_any(v, tool=tool, key=key) for v in value]

    lk = (key or "").lower()
    if lk in _TOOL_VALUE_KEYS.get(tool, set()):
        return _redacted_summary(value)
    if lk in _SENSITIVE_KEYS:
        return _redacted_summary(value)
    return value


def redact_tool_arguments(tool: str, args: dict[str, Any]) -> dict[str, Any]:
    """Redact tool arguments for safe logging."""
    return _redact_any(args or {}, tool=tool, key=None)


__all__ = ["redact_tool_arguments"]
