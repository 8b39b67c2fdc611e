"""
Glob search over a formatted snapshot.

Query rules:
- terms are separated by an unescaped `|` (any term may match)
- `*` matches any run of characters, `?` exactly one character
- a backslash escapes `*`, `?`, `|` or `\\`
- matching is case-insensitive and a term may match anywhere in a line's
  searchable text (role, quoted name, attributes); uids and indentation are
  not searched
"""

from __future__ import annotations

import re

from .formatter import iter_lines, node_body
from .model import Snapshot

SEPARATOR = "--"

_SPECIAL = {"*", "?", "|", "\\"}


def split_terms(query: str) -> list[str]:
    """Split on unescaped `|`. Escapes are kept so the glob compiler sees them."""
    terms: list[str] = []
    buf: list[str] = []
    i = 0
    while i < len(query):
        ch = query[i]
        if ch == "\\" and i + 1 < len(query):
            buf.append(query[i : i + 2])
            i += 2
            continue
        if ch == "|":
            terms.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    terms.append("".join(buf))
    return [t.strip() for t in terms if t.strip()]


def compile_term(term: str) -> re.Pattern[str]:
    out: list[str] = []
    i = 0
    while i < len(term):
        ch = term[i]
        if ch == "\\" and i + 1 < len(term) and term[i + 1] in _SPECIAL:
            out.append(re.escape(term[i + 1]))
            i += 2
            continue
        if ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("".join(out), re.IGNORECASE | re.DOTALL)


def compile_query(query: str) -> list[re.Pattern[str]]:
    return [compile_term(t) for t in split_terms(query or "")]


def search_snapshot(snapshot: Snapshot, query: str, context_levels: int = 1) -> str | None:
    """Matching lines plus `context_levels` lines around each, in document order.

    Overlapping or touching windows merge; separate windows are joined by `--`.
    Returns None when nothing matches.
    """
    patterns = compile_query(query)
    if not patterns:
        return None

    rows = iter_lines(snapshot)
    hits = [i for i, (node, _depth, _line) in enumerate(rows) if any(p.search(node_body(node)) for p in patterns)]
    if not hits:
        return None

    k = max(0, int(context_levels))
    windows: list[list[int]] = []
    for i in hits:
        start, end = max(0, i - k), min(len(rows) - 1, i + k)
        if windows and start <= windows[-1][1] + 1:
            windows[-1][1] = max(windows[-1][1], end)
        else:
            windows.append([start, end])

    chunks = ["\n".join(rows[j][2] for j in range(start, end + 1)) for start, end in windows]
    return f"\n{SEPARATOR}\n".join(chunks)


__all__ = ["SEPARATOR", "compile_query", "compile_term", "search_snapshot", "split_terms"]
