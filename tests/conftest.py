from __future__ import annotations

import pytest

from tracestack import TraceSession


def call(node_id: int | str, label: str, *children: dict, **fields: object) -> dict:
    """Build a plain call-node record the way a trace parser hands it over."""
    record: dict[str, object] = {"id": str(node_id), "label": label, "children": list(children)}
    record.update(fields)
    return record


def recursive(node_id: int | str, label: str, *children: dict, **fields: object) -> dict:
    return call(node_id, label, *children, status={"recursiveEntryPoint": True}, **fields)


def two_thread_forest() -> dict[str, dict]:
    return {
        "main": call(
            1,
            "app.App.run()",
            call(
                2,
                "util.Parser.parse()",
                call(3, "util.Lexer.next()", packageName="util"),
                packageName="util",
                color="#00f",
            ),
            call(4, "util.Parser.parse()", packageName="util", collapsed=True),
            packageName="app",
            color="#f00",
        ),
        "worker": call(
            10,
            "jobs.Job.execute()",
            call(11, "util.Parser.parse()", packageName="util"),
            packageName="jobs",
        ),
    }


@pytest.fixture()
def session() -> TraceSession:
    return TraceSession(two_thread_forest())
