"""Export subcommand implementation."""

from __future__ import annotations

import sys
from pathlib import Path

from ..serializers import export_to_json, save_export_json
from ._loading import open_session


def run_export(
    trace_file: Path,
    node_id: str | None,
    thread: str | None,
    *,
    selected: bool,
    output_path: Path | None,
) -> int:
    if (node_id is None) == (not selected):
        raise ValueError("export needs exactly one of a node id or --selected")

    session = open_session(trace_file, thread)
    if session is None:
        return 1

    if selected:
        root = session.get_thread_root()
        root_ids = session.extractor.find_selected_roots(root.id) if root is not None else []
        record: object = {
            "thread": session.current_thread_name,
            "regions": [session.extractor.selected_subtree(root_id) for root_id in root_ids],
        }
    else:
        record = session.extractor.bounded_subtree_copy(node_id)
        if record is None:
            print(f"Error: node not found: {node_id}", file=sys.stderr)
            return 1

    if output_path is not None:
        save_export_json(record, output_path)
    else:
        print(export_to_json(record))
    return 0
