from __future__ import annotations

import os
from dataclasses import dataclass


def _env_float(name: str, default: float, *, lo: float, hi: float) -> float:
    raw = os.environ.get(name)
    try:
        value = float(raw) if raw not in (None, "") else default
    except ValueError:
        value = default
    return max(lo, min(value, hi))


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    try:
        value = int(raw) if raw not in (None, "") else default
    except ValueError:
        value = default
    return max(lo, min(value, hi))


@dataclass
class SnapshotConfig:
    cdp_host: str = "127.0.0.1"
    cdp_port: int = 9222
    cdp_timeout: float = 8.0
    snapshot_timeout: float = 20.0
    action_timeout: float = 10.0
    max_name_length: int = 100
    max_depth: int = 400
    max_content_length: int = 25_000

    @property
    def http_base(self) -> str:
        return f"http://{self.cdp_host}:{self.cdp_port}"

    @classmethod
    def from_env(cls) -> SnapshotConfig:
        host = (os.environ.get("MCP_BROWSER_HOST") or "").strip() or "127.0.0.1"
        return cls(
            cdp_host=host,
            cdp_port=_env_int("MCP_BROWSER_PORT", 9222, lo=1, hi=65535),
            cdp_timeout=_env_float("MCP_CDP_TIMEOUT", 8.0, lo=1.0, hi=60.0),
            snapshot_timeout=_env_float("MCP_SNAPSHOT_TIMEOUT", 20.0, lo=2.0, hi=120.0),
            action_timeout=_env_float("MCP_ACTION_TIMEOUT", 10.0, lo=1.0, hi=60.0),
            max_name_length=_env_int("MCP_SNAPSHOT_NAME_MAX", 100, lo=10, hi=1000),
            max_depth=_env_int("MCP_SNAPSHOT_MAX_DEPTH", 400, lo=16, hi=800),
            max_content_length=_env_int("MCP_PAGE_CONTENT_MAX", 25_000, lo=1000, hi=1_000_000),
        )
