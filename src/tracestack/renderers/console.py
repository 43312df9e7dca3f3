"""Rich-based call tree console rendering."""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.tree import Tree

from ..core import TraceSession
from ..models import CallNode


def render_thread(
    session: TraceSession,
    thread_name: str | None = None,
    *,
    respect_collapsed: bool = True,
) -> str:
    name = thread_name if thread_name is not None else session.current_thread_name
    if name is None:
        return "No threads loaded\n"
    node_ids = session.get_all_node_ids_for_thread(name)
    tree = Tree(f"Thread: {name} ({len(node_ids)} nodes)")
    root_id = session.threads.get_thread_root_id(name)

    pending: list[tuple[Tree, str]] = [(tree, root_id)] if root_id is not None else []
    while pending:
        parent_branch, node_id = pending.pop()
        node = session.get_node_data_by_id(node_id)
        if node is None:
            continue
        children = session.get_children_ids(node_id)
        hidden = respect_collapsed and not session.get_node_state(node_id).expanded
        line = _node_line(node, session.selection.is_selected(node_id))
        if hidden and children:
            line += f" (+{len(children)} hidden)"
        branch = parent_branch.add(line)
        if not hidden:
            pending.extend((branch, child_id) for child_id in reversed(children))

    console = Console(record=True, width=120, markup=False, file=StringIO())
    console.print(tree)
    return console.export_text()


def _node_line(node: CallNode, selected: bool) -> str:
    parts = ["[x]" if selected else "[ ]", node.label or node.id]
    if node.freq is not None and node.freq > 1:
        parts.append(f"x{node.freq}")
    if node.time not in (None, ""):
        parts.append(f"({node.time}ns)")
    tags = _status_tags(node)
    if tags:
        parts.append("{" + ", ".join(tags) + "}")
    return " ".join(parts)


def _status_tags(node: CallNode) -> list[str]:
    tags: list[str] = []
    if node.status.recursive_entry_point:
        tags.append("recursive")
    if node.status.fan_out:
        tags.append("fan-out")
    if node.status.implementation_entry_point:
        tags.append("implementation")
    if node.compressed:
        tags.append("compressed")
    if node.is_exit:
        tags.append("exit")
    return tags
