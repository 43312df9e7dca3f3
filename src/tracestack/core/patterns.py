"""Identity-free subtree patterns and read-only export views.

Two traversals live here. ``bounded_subtree_copy`` copies a node and its
descendants down to the first special node on every path.
``compressed_recursive_view`` walks a same-label recursive chain once,
keeping the chain's exit node and folding the ordinary calls made along the
way into one entry per distinct structural pattern with a frequency.

Both work on the node store's adjacency, never mutate it, and return plain
nested dicts ready for serialization. Pattern keys are read from the call
nodes, not from the projected records.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from ..models import CallNode
from .node_store import NodeStore
from .session_config import DEFAULT_EXPORT_PROPERTIES

logger = logging.getLogger(__name__)

RECURSIVE_SUBTREE_TAG = "recursive subtree"
RECURSION_EXIT_TAG = "recursion exit"

ExportRecord = dict[str, object]

_STRUCTURAL_FIELDS = {"children", "status", "attributes"}
_FIELD_BY_ALIAS = {
    (info.alias or name): name for name, info in CallNode.model_fields.items()
}


def path_signature(node: CallNode, recursive_label: str) -> str:
    """Signature of a call subtree: its label plus sorted child signatures.

    Children carrying ``recursive_label`` are left out so that a call looks
    the same wherever it occurs in the recursive chain.
    """
    child_signatures = sorted(
        path_signature(child, recursive_label)
        for child in node.children
        if child.label != recursive_label
    )
    if not child_signatures:
        return node.label
    return f"{node.label}[{','.join(child_signatures)}]"


def structural_pattern(node: CallNode, recursive_label: str | None = None) -> str:
    """Deterministic pattern key for a call subtree, ignoring node ids.

    Only ``label``, ``method_name``, ``class_name`` and ``description`` take
    part. Special children count as opaque leaves and children carrying
    ``recursive_label`` are skipped.
    """
    return json.dumps(
        _pattern_tree(node, recursive_label, set()),
        sort_keys=True,
        separators=(",", ":"),
    )


def _pattern_fields(node: CallNode) -> dict[str, object]:
    return {
        "label": node.label,
        "methodName": node.method_name or "",
        "className": node.class_name or "",
        "description": node.description or "",
    }


def _pattern_tree(
    node: CallNode, recursive_label: str | None, seen: set[str]
) -> dict[str, object]:
    seen.add(node.id)
    tree = _pattern_fields(node)
    children: list[dict[str, object]] = []
    for child in node.children:
        if child.id in seen:
            continue
        if recursive_label is not None and child.label == recursive_label:
            continue
        if child.is_special:
            children.append(_pattern_fields(child))
        else:
            children.append(_pattern_tree(child, recursive_label, seen))
    tree["children"] = children
    return tree


def _record_children(record: ExportRecord) -> list[ExportRecord]:
    children = record.get("children")
    return children if isinstance(children, list) else []


class TraversalContext:
    """State shared by one export traversal.

    ``visited`` guards against cycles in malformed input. While a recursive
    chain is being summarized, ``recursive_label`` names the chain and
    ``patterns`` accumulates ``pattern -> [frequency, example]``.
    """

    def __init__(self) -> None:
        self.visited: set[str] = set()
        self.recursive_label: str | None = None
        self.patterns: dict[str, list] = {}

    def enter(self, node_id: str) -> bool:
        if node_id in self.visited:
            return False
        self.visited.add(node_id)
        return True

    def fold(self, node: CallNode, record: ExportRecord) -> None:
        key = structural_pattern(node, self.recursive_label)
        entry = self.patterns.get(key)
        if entry is None:
            self.patterns[key] = [1, record]
        else:
            entry[0] += 1


class SubtreePatternExtractor:
    """Builds export views of the node store without mutating it."""

    def __init__(
        self,
        store: NodeStore,
        properties: Sequence[str] = DEFAULT_EXPORT_PROPERTIES,
    ) -> None:
        self._store = store
        self._properties = [name for name in properties if name not in ("id", "children")]

    def bounded_subtree_copy(
        self,
        node_id: str,
        context: TraversalContext | None = None,
    ) -> ExportRecord | None:
        node = self._store.get_node_data_by_id(node_id)
        if node is None:
            logger.debug("bounded_subtree_copy: unknown node id %r", node_id)
            return None
        if node.status.recursive_entry_point:
            return self.compressed_recursive_view(node_id, context)
        return self._copy_until_special(node_id, context or TraversalContext(), is_root=True)

    def compressed_recursive_view(
        self,
        node_id: str,
        context: TraversalContext | None = None,
    ) -> ExportRecord | None:
        root = self._store.get_node_data_by_id(node_id)
        if root is None:
            logger.debug("compressed_recursive_view: unknown node id %r", node_id)
            return None
        ctx = context or TraversalContext()
        if not ctx.enter(node_id):
            return None
        ctx.recursive_label = root.label
        ctx.patterns = {}

        terminal: CallNode | None = None
        current: CallNode | None = root
        while current is not None:
            child_ids = self._store.get_children_ids(current.id)
            next_id = next((cid for cid in child_ids if self._label(cid) == root.label), None)
            if next_id is None:
                terminal = current
                break
            for child_id in child_ids:
                child = self._store.get_node_data_by_id(child_id)
                if child is None or child.label == root.label:
                    continue
                copy = self._copy_until_special(child_id, ctx, is_root=False)
                if copy is not None:
                    ctx.fold(child, copy)
            if not ctx.enter(next_id):
                break
            current = self._store.get_node_data_by_id(next_id)

        result = self._project(root)
        result["tag"] = RECURSIVE_SUBTREE_TAG
        children = _record_children(result)
        if terminal is not None:
            exit_record = self._project(terminal)
            exit_record["tag"] = RECURSION_EXIT_TAG
            for child_id in self._store.get_children_ids(terminal.id):
                copy = self._copy_until_special(child_id, ctx, is_root=False)
                if copy is not None:
                    _record_children(exit_record).append(copy)
            children.append(exit_record)
        for freq, example in ctx.patterns.values():
            example["freq"] = freq
            children.append(example)
        return result

    def find_selected_roots(self, root_id: str) -> list[str]:
        """Ids of selected nodes that have no selected ancestor below ``root_id``."""
        roots: list[str] = []
        stack: list[tuple[str, bool]] = [(root_id, False)]
        seen: set[str] = set()
        while stack:
            current_id, ancestor_selected = stack.pop()
            node = self._store.get_node_data_by_id(current_id)
            if node is None or current_id in seen:
                continue
            seen.add(current_id)
            if node.selected and not ancestor_selected:
                roots.append(current_id)
            for child_id in reversed(self._store.get_children_ids(current_id)):
                stack.append((child_id, ancestor_selected or node.selected))
        return roots

    def selected_subtree(
        self,
        node_id: str,
        context: TraversalContext | None = None,
    ) -> ExportRecord | None:
        """Copy of the selected region rooted at ``node_id``; unselected branches are cut."""
        node = self._store.get_node_data_by_id(node_id)
        ctx = context or TraversalContext()
        if node is None or not node.selected or not ctx.enter(node_id):
            return None
        record = self._project(node)
        for child_id in self._store.get_children_ids(node_id):
            child = self.selected_subtree(child_id, ctx)
            if child is not None:
                _record_children(record).append(child)
        return record

    def _copy_until_special(
        self,
        node_id: str,
        ctx: TraversalContext,
        *,
        is_root: bool,
    ) -> ExportRecord | None:
        if not ctx.enter(node_id):
            return None
        node = self._store.get_node_data_by_id(node_id)
        if node is None:
            return None
        record = self._project(node)
        if is_root or not node.is_special:
            for child_id in self._store.get_children_ids(node_id):
                child = self._copy_until_special(child_id, ctx, is_root=False)
                if child is not None:
                    _record_children(record).append(child)
        return record

    def _label(self, node_id: str) -> str | None:
        node = self._store.get_node_data_by_id(node_id)
        return node.label if node is not None else None

    def _project(self, node: CallNode) -> ExportRecord:
        record: ExportRecord = {"id": node.id}
        for name in self._properties:
            record[name] = _read_property(node, name)
        record["label"] = node.label
        record["status"] = node.status.model_dump(by_alias=True)
        if node.freq is not None:
            record["freq"] = node.freq
        if node.is_exit:
            record["isExit"] = True
        if node.compressed:
            record["compressed"] = True
        record["children"] = []
        return record


def _read_property(node: CallNode, name: str) -> object:
    field_name = name if name in CallNode.model_fields else _FIELD_BY_ALIAS.get(name)
    if field_name is not None and field_name not in _STRUCTURAL_FIELDS:
        value = getattr(node, field_name)
    else:
        value = node.attributes.get(name)
    return "" if value is None else value
