"""Blocking JSON fetches against the DevTools discovery endpoints (/json/*)."""

from __future__ import annotations

import json
from typing import Any
from urllib.error import URLError
from urllib.request import Request, urlopen


class HttpClientError(Exception):
    pass


def http_get_json(url: str, timeout: float = 2.0, *, method: str = "GET") -> Any:
    """Fetch JSON from URL. Returns None for an empty body."""
    req = Request(url, method=method, headers={"User-Agent": "mcp-page-snapshot/1.0"})
    try:
        with urlopen(req, timeout=timeout) as resp:
            body = resp.read().decode(errors="replace")
    except (TimeoutError, URLError, OSError) as exc:
        raise HttpClientError(str(exc)) from exc

    if not body.strip():
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        # /json/activate and /json/close answer with plain text ("Target activated").
        return body
