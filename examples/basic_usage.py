"""Basic usage example: load a recursive trace, select, compress and export."""

from __future__ import annotations

from pathlib import Path

from tracestack import EventType, TraceSession
from tracestack.renderers import render_thread
from tracestack.serializers import save_export_json


def _call(node_id: int, label: str, *children: dict, **fields: object) -> dict:
    return {"id": node_id, "label": label, "children": list(children), **fields}


def build_forest() -> dict[str, dict]:
    walk = _call(
        2,
        "ast.Visitor.visit()",
        _call(3, "log.Logger.debug()", packageName="log"),
        _call(
            4,
            "ast.Visitor.visit()",
            _call(5, "log.Logger.debug()", packageName="log"),
            _call(6, "ast.Visitor.visit()", _call(7, "ast.Node.leaf()", packageName="ast")),
            packageName="ast",
        ),
        packageName="ast",
        color="#3a7",
        status={"recursiveEntryPoint": True},
    )
    return {"main": _call(1, "app.Main.run()", walk, packageName="app")}


def main() -> None:
    output_dir = Path("artifacts")
    output_dir.mkdir(exist_ok=True)

    session = TraceSession(build_forest())
    session.bus.subscribe(
        EventType.SHAPE_CHANGED,
        lambda event: print(f"shape changed: {event.node_ids} compressed={event.compressed}"),
    )

    session.selection.select_by_package("log")
    print(f"log package: {session.get_package_selection_state('log')}")

    record = session.extractor.bounded_subtree_copy("2")
    export_path = save_export_json(record, output_dir / "visitor_summary.json")

    session.tree.compress("2")
    print(render_thread(session))
    print(f"Export saved to: {export_path}")


if __name__ == "__main__":
    main()
