"""Selection, expansion and highlight flags per node."""

from __future__ import annotations

import logging

from ..models import CallNode, StateRecord
from .node_store import NodeStore

logger = logging.getLogger(__name__)


class StateIndex:
    """Holds one ``StateRecord`` per stored node.

    The setters write the record and the node's own ``selected`` /
    ``collapsed`` attributes in the same call, so the two never disagree.
    """

    def __init__(self, store: NodeStore) -> None:
        self._store = store
        self._records: dict[str, StateRecord] = {}
        self._selected: dict[str, None] = {}
        self.current: str | None = None

    def create(self, node: CallNode) -> StateRecord:
        record = StateRecord(selected=node.selected, expanded=not node.collapsed)
        self._records[node.id] = record
        if node.selected:
            self._selected[node.id] = None
        return record

    def has_record(self, node_id: str) -> bool:
        return node_id in self._records

    def get_node_state(self, node_id: str) -> StateRecord:
        record = self._records.get(node_id)
        if record is None:
            return StateRecord(selected=False, expanded=False, highlighted=False)
        return record.model_copy()

    def update_selection(self, node_id: str, selected: bool) -> bool:
        record = self._records.get(node_id)
        node = self._store.get_node_data_by_id(node_id)
        if record is None or node is None or record.selected == selected:
            return False
        record.selected = selected
        node.selected = selected
        if selected:
            self._selected[node_id] = None
        else:
            self._selected.pop(node_id, None)
        return True

    def update_expansion(self, node_id: str, expanded: bool) -> bool:
        record = self._records.get(node_id)
        node = self._store.get_node_data_by_id(node_id)
        if record is None or node is None or record.expanded == expanded:
            return False
        record.expanded = expanded
        node.collapsed = not expanded
        return True

    def highlight(self, node_id: str, highlighted: bool = True) -> bool:
        record = self._records.get(node_id)
        if record is None:
            logger.debug("highlight: unknown node id %r", node_id)
            return False
        if record.highlighted == highlighted:
            return False
        record.highlighted = highlighted
        return True

    def get_all_highlighted(self) -> list[str]:
        return [node_id for node_id, record in self._records.items() if record.highlighted]

    def clear_all_highlights(self) -> list[str]:
        changed: list[str] = []
        for node_id, record in self._records.items():
            if record.highlighted:
                record.highlighted = False
                changed.append(node_id)
        return changed

    def is_selected(self, node_id: str) -> bool:
        return node_id in self._selected

    def get_all_selected(self) -> list[str]:
        return list(self._selected)

    def set_current(self, node_id: str) -> bool:
        if node_id not in self._records:
            logger.debug("set_current: unknown node id %r", node_id)
            return False
        self.current = node_id
        return True

    def clear(self) -> None:
        self._records.clear()
        self._selected.clear()
        self.current = None

    def __len__(self) -> int:
        return len(self._records)
