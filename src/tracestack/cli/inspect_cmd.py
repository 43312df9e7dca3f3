"""Inspect subcommand implementation."""

from __future__ import annotations

import json
from pathlib import Path

from ..core import TraceSession
from ..renderers import render_thread
from ._loading import open_session


def run_inspect(
    trace_file: Path,
    thread: str | None,
    *,
    compress: bool,
    show_all: bool,
    as_json: bool,
    output_path: Path | None,
) -> int:
    if output_path is not None and not as_json:
        raise ValueError("--output is only supported when --json is provided")

    session = open_session(trace_file, thread)
    if session is None:
        return 1
    if compress:
        session.tree.compress_all()
    summary = _build_summary(session)

    if as_json:
        payload = json.dumps(summary, ensure_ascii=True, sort_keys=True)
        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(payload + "\n", encoding="utf-8")
        else:
            print(payload)
        return 0

    print(f"Threads: {len(summary['threads'])}")
    print(f"Current thread: {summary['current_thread'] or '<none>'}")
    print(f"Nodes: {summary['node_count']}")
    print(f"Packages: {summary['package_count']}")
    print("Special nodes:")
    for flag, count in summary["special_counts"].items():
        print(f"  - {flag}: {count}")
    if summary["compressed"]:
        print(f"Compressed: {', '.join(summary['compressed'])}")
    print()
    print(render_thread(session, respect_collapsed=not show_all))
    return 0


def _build_summary(session: TraceSession) -> dict:
    threads: dict[str, dict[str, object]] = {}
    special_counts = {"recursive_entry_point": 0, "fan_out": 0, "implementation_entry_point": 0}
    compressed: list[str] = []
    for name in session.get_thread_names():
        node_ids = session.get_all_node_ids_for_thread(name)
        threads[name] = {
            "root_id": session.threads.get_thread_root_id(name),
            "node_count": len(node_ids),
            "packages": session.threads.get_packages_for_thread(name),
        }
        for node_id in node_ids:
            node = session.get_node_data_by_id(node_id)
            if node is None:
                continue
            for flag in special_counts:
                if getattr(node.status, flag):
                    special_counts[flag] += 1
            if node.compressed:
                compressed.append(node_id)

    return {
        "threads": threads,
        "current_thread": session.current_thread_name,
        "node_count": len(session.store),
        "package_count": len(list(session.packages)),
        "special_counts": special_counts,
        "compressed": compressed,
    }
