"""Trace session: the owned aggregate for one loaded trace."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterator, Mapping

from pydantic import ValidationError

from ..models import CallNode, Package, PackageSelectionState, StateRecord
from .events import ChangeEvent, EventBus, EventType
from .node_store import NodeStore
from .packages import PackageAggregator
from .patterns import SubtreePatternExtractor
from .selection import SelectionCoordinator
from .session_config import SessionConfig
from .state_index import StateIndex
from .threads import ThreadIndex
from .tree_ops import TreeOperations

logger = logging.getLogger(__name__)

ThreadsInput = Mapping[str, CallNode | Mapping[str, object]]


class TraceSession:
    """Owns the node store and every index derived from it.

    Components never share global state: each session builds its own store,
    state index, thread index and package aggregator and hands them to the
    selection coordinator, tree operations and pattern extractor. Reloading a
    trace means calling ``load`` again (or building a new session).

    Error-handling contract
    ----------------------
    - Unknown node ids are logged at debug level and the call returns a
      falsy result without touching any index.
    - Malformed input (node without id, duplicate id, unknown thread) is
      reported with ``warnings.warn`` and skipped; the rest of the trace loads.
    """

    def __init__(
        self,
        threads: ThreadsInput | None = None,
        *,
        config: SessionConfig | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.bus = bus or EventBus()
        self.store = NodeStore()
        self.states = StateIndex(self.store)
        self.threads = ThreadIndex()
        self.packages = PackageAggregator(self.threads, self.states)
        self.selection = SelectionCoordinator(
            self.store, self.states, self.packages, self.threads, self.bus
        )
        self.tree = TreeOperations(
            self.store, self.states, self.threads, self.bus, on_structure_changed=self.rebuild
        )
        self.extractor = SubtreePatternExtractor(self.store, self.config.export_properties)
        self._roots: dict[str, CallNode] = {}
        if threads:
            self.load(threads)

    def load(self, threads: ThreadsInput) -> list[str]:
        """Replace the session contents with a ``thread name -> root`` forest."""
        self.clear()
        for name, root in threads.items():
            node = _coerce_node(root, f"root of thread {name!r}")
            if node is not None:
                self._roots[name] = node
        self._ingest_all()

        names = list(self._roots)
        default = self.config.default_thread
        initial = default if default in self._roots else (names[0] if names else None)
        if initial is not None:
            self.switch_thread(initial)
        return names

    def clear(self) -> None:
        """Empty the session: node store, state, thread and package indices together."""
        self._reset_indices()
        self.tree.clear_snapshots()
        self._roots.clear()

    def rebuild(self) -> None:
        """Re-derive every index from the forest after a structural edit."""
        current_thread = self.threads.current_thread_name
        focused = self.states.current
        highlighted = self.states.get_all_highlighted()
        self._reset_indices()
        self._ingest_all()
        for node_id in highlighted:
            if self.states.has_record(node_id):
                self.states.highlight(node_id)
        if current_thread is not None:
            self.threads.set_current_thread(current_thread)
        if focused is not None:
            self.states.set_current(focused)

    def add_node(
        self,
        node: CallNode | Mapping[str, object],
        parent_id: str | None = None,
        *,
        thread_name: str | None = None,
    ) -> bool:
        """Register ``node`` and any children it carries.

        With ``parent_id`` the node joins the parent's thread and is appended
        to the parent's children. Without it the node becomes the root of the
        new thread ``thread_name``. Nothing is registered unless every check
        passes.
        """
        call_node = _coerce_node(node, "added node")
        if call_node is None:
            return False

        subtree_ids = [current.id for current in _iter_subtree(call_node)]
        if len(set(subtree_ids)) != len(subtree_ids) or any(
            node_id in self.store for node_id in subtree_ids
        ):
            warnings.warn(
                f"tracestack: duplicate node id in subtree of {call_node.id!r}; node not added",
                stacklevel=2,
            )
            return False

        if parent_id is not None:
            parent = self.store.get_node_data_by_id(parent_id)
            if parent is None:
                logger.debug("add_node: unknown parent id %r", parent_id)
                return False
            owner = self.threads.get_thread_for_node_id(parent_id)
            if owner is None or (thread_name is not None and thread_name != owner):
                warnings.warn(
                    f"tracestack: node {call_node.id!r} cannot join thread {thread_name!r}; "
                    f"its parent belongs to {owner!r}",
                    stacklevel=2,
                )
                return False
            if not any(child is call_node for child in parent.children):
                parent.children.append(call_node)
            self._ingest_subtree(owner, call_node, parent_id)
            return True

        if thread_name is None or self.threads.has_thread(thread_name):
            warnings.warn(
                f"tracestack: root node {call_node.id!r} needs a new thread name, "
                f"got {thread_name!r}",
                stacklevel=2,
            )
            return False
        self._roots[thread_name] = call_node
        self.threads.register_thread(thread_name, call_node.id)
        self._ingest_subtree(thread_name, call_node, None)
        if self.threads.current_thread_name is None:
            self.switch_thread(thread_name)
        return True

    def switch_thread(self, thread_name: str) -> bool:
        if not self.threads.has_thread(thread_name):
            logger.warning("switch_thread: thread %r not found", thread_name)
            return False
        if self.threads.current_thread_name == thread_name:
            return True
        self.threads.set_current_thread(thread_name)
        self.bus.publish(
            ChangeEvent(event_type=EventType.THREAD_SWITCHED, thread_name=thread_name)
        )
        return True

    @property
    def current_thread_name(self) -> str | None:
        return self.threads.current_thread_name

    @property
    def roots(self) -> dict[str, CallNode]:
        return dict(self._roots)

    def get_thread_names(self) -> list[str]:
        return self.threads.get_thread_names()

    def get_thread_root(self, thread_name: str | None = None) -> CallNode | None:
        name = thread_name if thread_name is not None else self.threads.current_thread_name
        return self._roots.get(name) if name is not None else None

    def get_node_data_by_id(self, node_id: str) -> CallNode | None:
        return self.store.get_node_data_by_id(node_id)

    def get_node_state(self, node_id: str) -> StateRecord:
        return self.states.get_node_state(node_id)

    def get_children_ids(self, node_id: str) -> list[str]:
        return self.store.get_children_ids(node_id)

    def get_ancestor_ids(self, node_id: str) -> list[str]:
        return self.store.get_ancestor_ids(node_id)

    def get_thread_for_node_id(self, node_id: str) -> str | None:
        return self.threads.get_thread_for_node_id(node_id)

    def get_all_node_ids_for_thread(self, thread_name: str) -> list[str]:
        return self.threads.get_all_node_ids_for_thread(thread_name)

    def get_all_packages(self) -> list[str]:
        return self.packages.get_all_packages()

    def get_package(self, package_name: str) -> Package | None:
        return self.packages.get_package(package_name)

    def get_package_color(self, package_name: str) -> str:
        return self.packages.get_package_color(package_name)

    def get_package_node_ids(self, package_name: str) -> list[str]:
        return self.packages.get_package_node_ids(package_name)

    def get_package_selected_ids(self, package_name: str) -> list[str]:
        return self.packages.get_package_selected_ids(package_name)

    def get_package_selection_state(self, package_name: str) -> PackageSelectionState:
        return self.selection.get_package_selection_state(package_name)

    def highlight(self, node_id: str, highlighted: bool = True) -> bool:
        return self.states.highlight(node_id, highlighted)

    def clear_all_highlights(self) -> list[str]:
        return self.states.clear_all_highlights()

    def set_current(self, node_id: str) -> bool:
        """Mark ``node_id`` as the focused node."""
        return self.states.set_current(node_id)

    def _reset_indices(self) -> None:
        self.store.clear()
        self.states.clear()
        self.threads.clear()
        self.packages.clear()

    def _ingest_all(self) -> None:
        for name, root in self._roots.items():
            self.threads.register_thread(name, root.id)
            self._ingest_subtree(name, root, None)

    def _ingest_subtree(self, thread_name: str, root: CallNode, parent_id: str | None) -> None:
        stack: list[tuple[CallNode, str | None]] = [(root, parent_id)]
        while stack:
            node, parent = stack.pop()
            if node.id in self.store:
                warnings.warn(
                    f"tracestack: duplicate node id {node.id!r} in thread {thread_name!r}; "
                    "subtree skipped",
                    stacklevel=3,
                )
                continue
            self.store.add_node(node, parent)
            self.states.create(node)
            self.threads.add_node_to_thread(thread_name, node.id, node.package_name)
            self.packages.add_node(node)
            stack.extend((child, node.id) for child in reversed(node.children))


def _coerce_node(value: CallNode | Mapping[str, object], what: str) -> CallNode | None:
    if isinstance(value, CallNode):
        return value
    if not isinstance(value, Mapping) or value.get("id") in (None, ""):
        warnings.warn(f"tracestack: skipping {what}: call node without id", stacklevel=3)
        return None
    try:
        return CallNode.model_validate(dict(value))
    except ValidationError as exc:
        warnings.warn(f"tracestack: skipping {what}: {exc}", stacklevel=3)
        return None


def _iter_subtree(root: CallNode) -> Iterator[CallNode]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(node.children)
