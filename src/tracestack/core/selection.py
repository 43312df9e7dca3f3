"""Selection coordinator: the single writer of selection state."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models import PackageSelectionState
from .events import ChangeEvent, EventBus, EventType
from .node_store import NodeStore
from .packages import PackageAggregator
from .state_index import StateIndex
from .threads import ThreadIndex

logger = logging.getLogger(__name__)


class SelectionCoordinator:
    """Fans selection changes out to the state index and package aggregator.

    Every bulk operation is a loop of ``select(..., batch=True)`` followed by
    one bulk ``selection_changed`` event carrying all changed ids, published
    only when something actually changed.
    """

    def __init__(
        self,
        store: NodeStore,
        states: StateIndex,
        packages: PackageAggregator,
        threads: ThreadIndex,
        bus: EventBus,
    ) -> None:
        self._store = store
        self._states = states
        self._packages = packages
        self._threads = threads
        self._bus = bus

    def select(self, node_id: str, selected: bool = True, batch: bool = False) -> bool:
        node = self._store.get_node_data_by_id(node_id)
        if node is None:
            logger.debug("select: unknown node id %r", node_id)
            return False
        if not self._states.update_selection(node_id, selected):
            return False
        if node.package_name:
            self._packages.update_node_selection(node.package_name, node_id, selected)
        if not batch:
            self._bus.publish(
                ChangeEvent(
                    event_type=EventType.SELECTION_CHANGED,
                    node_ids=[node_id],
                    selected=selected,
                    package_name=node.package_name,
                )
            )
        return True

    def deselect(self, node_id: str, batch: bool = False) -> bool:
        return self.select(node_id, False, batch)

    def is_selected(self, node_id: str) -> bool:
        return self._states.is_selected(node_id)

    def select_children(self, node_id: str) -> list[str]:
        """Select a node and its direct children."""
        return self._apply([node_id, *self._store.get_children_ids(node_id)], True)

    def deselect_children(self, node_id: str) -> list[str]:
        return self._apply(self._store.get_children_ids(node_id), False)

    def select_all_children(self, node_id: str) -> list[str]:
        """Select a node and every descendant."""
        return self._apply([node_id, *self._store.iter_descendant_ids(node_id)], True)

    def deselect_all_children(self, node_id: str) -> list[str]:
        return self._apply(list(self._store.iter_descendant_ids(node_id)), False)

    def select_parent(self, node_id: str) -> list[str]:
        return self._set_parent(node_id, True)

    def deselect_parent(self, node_id: str) -> list[str]:
        return self._set_parent(node_id, False)

    def select_ancestors(self, node_id: str) -> list[str]:
        return self._apply(self._store.get_ancestor_ids(node_id), True)

    def deselect_ancestors(self, node_id: str) -> list[str]:
        return self._apply(self._store.get_ancestor_ids(node_id), False)

    def select_all(self) -> list[str]:
        """Select every node of the current thread."""
        return self._apply(self._current_thread_node_ids(), True)

    def deselect_all(self) -> list[str]:
        return self._apply(self._current_thread_node_ids(), False)

    def select_by_package(self, package_name: str, selected: bool = True) -> list[str]:
        """Select or deselect the current thread's members of ``package_name``."""
        return self._apply(
            self._packages.get_package_node_ids(package_name),
            selected,
            package_name=package_name,
        )

    def get_package_selection_state(self, package_name: str) -> PackageSelectionState:
        return self._packages.get_selection_state(package_name)

    def _set_parent(self, node_id: str, selected: bool) -> list[str]:
        parent_id = self._store.get_parent_id(node_id)
        if parent_id is None:
            logger.debug("parent selection: %r has no parent", node_id)
            return []
        return [parent_id] if self.select(parent_id, selected) else []

    def _current_thread_node_ids(self) -> list[str]:
        return self._threads.get_all_node_ids_for_thread(self._threads.current_thread_name)

    def _apply(
        self,
        node_ids: Iterable[str],
        selected: bool,
        *,
        package_name: str | None = None,
    ) -> list[str]:
        changed = [node_id for node_id in node_ids if self.select(node_id, selected, batch=True)]
        if changed:
            self._bus.publish(
                ChangeEvent(
                    event_type=EventType.SELECTION_CHANGED,
                    node_ids=changed,
                    selected=selected,
                    package_name=package_name,
                )
            )
        return changed
