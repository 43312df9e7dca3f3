from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import call, recursive, two_thread_forest

from tracestack import CallNode, TraceSession, TracestackLoadError
from tracestack.serializers import (
    export_to_json,
    load_threads_json,
    save_export_json,
    save_threads_json,
    threads_from_json,
    threads_to_json,
)


def test_threads_from_json_builds_call_nodes() -> None:
    threads = threads_from_json(json.dumps(two_thread_forest()))

    assert list(threads) == ["main", "worker"]
    assert isinstance(threads["main"], CallNode)
    assert threads["main"].children[0].package_name == "util"


def test_threads_json_uses_camel_case_keys() -> None:
    threads = threads_from_json(json.dumps({"main": recursive(1, "f", call(2, "g"))}))
    payload = json.loads(threads_to_json(threads))

    assert payload["main"]["status"]["recursiveEntryPoint"] is True
    assert "packageName" in payload["main"]
    assert "package_name" not in payload["main"]


def test_save_and_load_threads_json_file(tmp_path: Path) -> None:
    threads = threads_from_json(json.dumps(two_thread_forest()))
    output = save_threads_json(threads, tmp_path / "nested" / "trace.json")

    loaded = load_threads_json(output)
    assert loaded["worker"].model_dump() == threads["worker"].model_dump()


@pytest.mark.parametrize("payload", ["{not json", "[1, 2]"])
def test_threads_from_json_rejects_bad_documents(payload: str) -> None:
    with pytest.raises(TracestackLoadError, match="Failed to parse trace JSON"):
        threads_from_json(payload)


def test_threads_from_json_rejects_invalid_node() -> None:
    with pytest.raises(TracestackLoadError, match="thread 'main'"):
        threads_from_json(json.dumps({"main": {"id": "1", "freq": "many"}}))


def test_threads_without_root_id_are_skipped() -> None:
    document = {"empty": {"label": "x"}, "main": call(1, "run")}

    with pytest.warns(UserWarning, match="has no root id"):
        threads = threads_from_json(json.dumps(document))

    assert list(threads) == ["main"]


def test_load_threads_json_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_threads_json(tmp_path / "absent.json")


def test_export_record_round_trips_as_plain_json(tmp_path: Path) -> None:
    session = TraceSession({"main": recursive(1, "f", call(2, "g"), call(3, "f"))})
    record = session.extractor.bounded_subtree_copy("1")

    assert json.loads(export_to_json(record)) == record

    output = save_export_json(record, tmp_path / "export.json")
    assert json.loads(output.read_text(encoding="utf-8"))["tag"] == "recursive subtree"
