"""Expansion and reversible recursive-call compression."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from ..models import CallNode, CompressionSnapshot
from .events import ChangeEvent, EventBus, EventType
from .node_store import NodeStore
from .patterns import path_signature
from .state_index import StateIndex
from .threads import ThreadIndex

logger = logging.getLogger(__name__)


class TreeOperations:
    """Expand/collapse and compress/decompress nodes of the loaded trace.

    ``on_structure_changed`` is invoked after compression rewrote a node's
    children and before ``shape_changed`` is published; the session uses it
    to rebuild its indices from the edited forest.
    """

    def __init__(
        self,
        store: NodeStore,
        states: StateIndex,
        threads: ThreadIndex,
        bus: EventBus,
        on_structure_changed: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._states = states
        self._threads = threads
        self._bus = bus
        self._on_structure_changed = on_structure_changed
        self._snapshots: dict[str, CompressionSnapshot] = {}

    def expand(self, node_id: str) -> bool:
        if not self._store.has_node(node_id):
            logger.debug("expand: unknown node id %r", node_id)
            return False
        return self._set_expanded([node_id], True) == [node_id]

    def collapse(self, node_id: str) -> bool:
        if not self._store.has_node(node_id):
            logger.debug("collapse: unknown node id %r", node_id)
            return False
        return self._set_expanded([node_id], False) == [node_id]

    def toggle_expand(self, node_id: str) -> bool:
        if not self._store.has_node(node_id):
            logger.debug("toggle_expand: unknown node id %r", node_id)
            return False
        expanded = self._states.get_node_state(node_id).expanded
        return bool(self._set_expanded([node_id], not expanded))

    def expand_all_descendants(self, node_id: str) -> list[str]:
        """Expand a node and everything below it."""
        return self._set_expanded([node_id, *self._store.iter_descendant_ids(node_id)], True)

    def collapse_all_descendants(self, node_id: str) -> list[str]:
        """Collapse everything below a node, leaving the node itself as is."""
        return self._set_expanded(list(self._store.iter_descendant_ids(node_id)), False)

    def _set_expanded(self, node_ids: list[str], expanded: bool) -> list[str]:
        changed = [
            node_id for node_id in node_ids if self._states.update_expansion(node_id, expanded)
        ]
        if changed:
            self._bus.publish(
                ChangeEvent(
                    event_type=EventType.EXPANSION_CHANGED,
                    node_ids=changed,
                    expanded=expanded,
                )
            )
        return changed

    def is_compressed(self, node_id: str) -> bool:
        node = self._store.get_node_data_by_id(node_id)
        return node is not None and node.compressed and node_id in self._snapshots

    def get_snapshot(self, node_id: str) -> CompressionSnapshot | None:
        return self._snapshots.get(node_id)

    def clear_snapshots(self) -> None:
        self._snapshots.clear()

    def compress(self, node_id: str) -> bool:
        """Replace a recursive entry point's children with a deduplicated summary.

        The recursive chain below the entry is flattened: calls carrying the
        entry's label are relays (descended into) or exits (kept verbatim),
        and every other call is folded by ``path_signature`` into one
        representative whose ``freq`` counts the occurrences.
        """
        node = self._store.get_node_data_by_id(node_id)
        if node is None:
            logger.debug("compress: unknown node id %r", node_id)
            return False
        if not node.status.recursive_entry_point or node.compressed:
            return False

        snapshot = CompressionSnapshot(
            node_id=node_id,
            children=[child.model_copy(deep=True) for child in node.children],
        )
        node.children = _summarize_recursive_chain(node)
        node.compressed = True
        self._snapshots[node_id] = snapshot
        self._structure_changed(node_id, compressed=True)
        return True

    def decompress(self, node_id: str) -> bool:
        snapshot = self._snapshots.get(node_id)
        if snapshot is None:
            return False
        node = self._store.get_node_data_by_id(node_id)
        if node is None:
            logger.debug("decompress: node %r no longer stored", node_id)
            return False
        del self._snapshots[node_id]
        if not node.compressed:
            return False
        node.children = snapshot.restore()
        node.compressed = False
        self._drop_stale_snapshots(node.children)
        self._structure_changed(node_id, compressed=False)
        return True

    def compress_all(self, thread_name: str | None = None) -> list[str]:
        """Compress every recursive entry point of a thread (current thread by default)."""
        name = thread_name if thread_name is not None else self._threads.current_thread_name
        candidates = [
            node_id
            for node_id in self._threads.get_all_node_ids_for_thread(name)
            if (node := self._store.get_node_data_by_id(node_id)) is not None
            and node.status.recursive_entry_point
        ]
        # A compression rebuilds the indices, so nested entry points that the
        # outer summary dropped are skipped here.
        return [
            node_id
            for node_id in candidates
            if self._store.has_node(node_id) and self.compress(node_id)
        ]

    def _drop_stale_snapshots(self, children: list[CallNode]) -> None:
        """Forget snapshots of restored nodes that came back uncompressed."""
        stack = list(children)
        while stack:
            current = stack.pop()
            if not current.compressed:
                self._snapshots.pop(current.id, None)
            stack.extend(current.children)

    def _structure_changed(self, node_id: str, *, compressed: bool) -> None:
        if self._on_structure_changed is not None:
            self._on_structure_changed()
        self._bus.publish(
            ChangeEvent(
                event_type=EventType.SHAPE_CHANGED,
                node_ids=[node_id],
                compressed=compressed,
                thread_name=self._threads.get_thread_for_node_id(node_id),
            )
        )


def _summarize_recursive_chain(entry: CallNode) -> list[CallNode]:
    recursive_label = entry.label
    merged: dict[str, CallNode] = {}
    exits: list[CallNode] = []
    queue: deque[CallNode] = deque(entry.children)

    while queue:
        child = queue.popleft()
        if child.label == recursive_label:
            if any(grandchild.label == recursive_label for grandchild in child.children):
                queue.extend(child.children)
            else:
                exit_node = child.model_copy(deep=True)
                exit_node.is_exit = True
                exits.append(exit_node)
            continue

        signature = path_signature(child, recursive_label)
        current = child.model_copy(deep=True)
        current.freq = current.freq or 1
        existing = merged.get(signature)
        if existing is None:
            merged[signature] = current
            continue
        target, source = (existing, current)
        if current.numeric_id() < existing.numeric_id():
            target, source = (current, existing)
            merged[signature] = target
        target.freq = (target.freq or 1) + (source.freq or 1)

    return sorted([*merged.values(), *exits], key=CallNode.numeric_id)
