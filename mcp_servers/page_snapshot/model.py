"""Snapshot data model.

A Snapshot is the arena and a uid is an index into it. Nodes are frozen once
built; a newer snapshot for the same tab replaces the whole arena.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class SnapshotNode:
    uid: str
    role: str
    name: str = ""
    backend_node_id: int | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False)
    children: tuple[SnapshotNode, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.attributes, MappingProxyType):
            object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def walk(self, depth: int = 0) -> Iterator[tuple[SnapshotNode, int]]:
        """Depth-first pre-order traversal yielding (node, depth)."""
        stack: list[tuple[SnapshotNode, int]] = [(self, depth)]
        while stack:
            node, d = stack.pop()
            yield node, d
            for child in reversed(node.children):
                stack.append((child, d + 1))


@dataclass(frozen=True)
class Snapshot:
    tab_id: str
    generation: int
    root: SnapshotNode
    timestamp: float
    url: str = ""
    title: str = ""
    _index: Mapping[str, SnapshotNode] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, SnapshotNode] = {}
        for node, _depth in self.root.walk():
            if node.uid in index:
                raise ValueError(f"duplicate uid in snapshot: {node.uid}")
            index[node.uid] = node
        object.__setattr__(self, "_index", MappingProxyType(index))

    def get(self, uid: str) -> SnapshotNode | None:
        return self._index.get(uid)

    def __contains__(self, uid: object) -> bool:
        return uid in self._index

    def __len__(self) -> int:
        return len(self._index)

    @property
    def uids(self) -> list[str]:
        return list(self._index)


__all__ = ["Snapshot", "SnapshotNode"]
