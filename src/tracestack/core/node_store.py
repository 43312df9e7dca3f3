"""Canonical node records and parent/child adjacency."""

from __future__ import annotations

from collections.abc import Iterator

from ..models import CallNode


class NodeStore:
    """Maps node ids to their ``CallNode`` record, parent id and ordered child ids."""

    def __init__(self) -> None:
        self._nodes: dict[str, CallNode] = {}
        self._parents: dict[str, str] = {}
        self._children: dict[str, list[str]] = {}

    def add_node(self, node: CallNode, parent_id: str | None = None) -> None:
        self._nodes[node.id] = node
        if parent_id is not None:
            self.link(node.id, parent_id)

    def link(self, node_id: str, parent_id: str) -> None:
        """Record ``node_id`` as the last child of ``parent_id``."""
        self._parents[node_id] = parent_id
        self._children.setdefault(parent_id, []).append(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node_data_by_id(self, node_id: str) -> CallNode | None:
        return self._nodes.get(node_id)

    def get_children_ids(self, node_id: str) -> list[str]:
        return list(self._children.get(node_id, []))

    def get_parent_id(self, node_id: str) -> str | None:
        return self._parents.get(node_id)

    def get_ancestor_ids(self, node_id: str) -> list[str]:
        """Walk the parent chain, nearest ancestor first.

        There is no cycle protection: ingestion only ever produces trees.
        """
        ancestors: list[str] = []
        current = node_id
        while current in self._parents:
            current = self._parents[current]
            ancestors.append(current)
        return ancestors

    def iter_descendant_ids(self, node_id: str) -> Iterator[str]:
        """Yield all descendants of ``node_id`` in pre-order, excluding itself."""
        stack = list(reversed(self._children.get(node_id, [])))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._children.get(current, [])))

    def get_all_node_ids(self) -> list[str]:
        return list(self._nodes)

    def clear(self) -> None:
        self._nodes.clear()
        self._parents.clear()
        self._children.clear()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes
