from __future__ import annotations

from conftest import call, recursive

from tracestack import CallNode, SessionConfig, TraceSession
from tracestack.core import (
    RECURSION_EXIT_TAG,
    RECURSIVE_SUBTREE_TAG,
    NodeStore,
    SubtreePatternExtractor,
    TraversalContext,
    path_signature,
    structural_pattern,
)


def _ids(record: dict) -> list[str]:
    return [child["id"] for child in record["children"]]


def test_exit_is_last_same_label_node() -> None:
    session = TraceSession(
        {"main": recursive(1, "f", call(2, "f", call(3, "f", call(4, "g"))))}
    )

    view = session.extractor.compressed_recursive_view("1")

    assert view is not None
    assert view["tag"] == RECURSIVE_SUBTREE_TAG
    assert _ids(view) == ["3"]
    exit_record = view["children"][0]
    assert exit_record["tag"] == RECURSION_EXIT_TAG
    assert _ids(exit_record) == ["4"]


def test_view_folds_calls_along_the_chain() -> None:
    session = TraceSession(
        {
            "main": recursive(
                1,
                "f",
                call(2, "log", call(20, "write")),
                call(3, "f", call(4, "log", call(40, "write")), call(5, "f", call(6, "g"))),
            )
        }
    )

    view = session.extractor.compressed_recursive_view("1")

    assert view is not None
    assert _ids(view) == ["5", "2"]
    pattern = view["children"][1]
    assert pattern["freq"] == 2
    assert _ids(pattern) == ["20"]


def test_view_does_not_mutate_store() -> None:
    session = TraceSession({"main": recursive(1, "f", call(2, "x"), call(3, "f"))})
    before = session.get_node_data_by_id("1").model_dump()

    session.extractor.compressed_recursive_view("1")

    assert session.get_node_data_by_id("1").model_dump() == before
    assert session.get_children_ids("1") == ["2", "3"]


def test_bounded_copy_stops_at_special_descendants() -> None:
    session = TraceSession(
        {
            "main": call(
                1,
                "root",
                call(2, "fan", call(3, "inner"), status={"fanOut": True}),
                call(4, "plain", call(5, "leaf")),
            )
        }
    )

    record = session.extractor.bounded_subtree_copy("1")

    assert record is not None
    assert _ids(record) == ["2", "4"]
    assert record["children"][0]["children"] == []
    assert _ids(record["children"][1]) == ["5"]

    special_root = session.extractor.bounded_subtree_copy("2")
    assert special_root is not None
    assert _ids(special_root) == ["3"]


def test_bounded_copy_delegates_for_recursive_root() -> None:
    session = TraceSession({"main": recursive(1, "f", call(2, "f", call(3, "x")))})

    record = session.extractor.bounded_subtree_copy("1")

    assert record is not None
    assert record["tag"] == RECURSIVE_SUBTREE_TAG
    assert session.extractor.bounded_subtree_copy("missing") is None


def test_projection_uses_configured_properties() -> None:
    store = NodeStore()
    store.add_node(
        CallNode.model_validate(
            {"id": "1", "label": "a", "methodName": "run", "threadId": 7, "time": 12}
        )
    )
    extractor = SubtreePatternExtractor(store, ["methodName", "threadId", "layer"])

    record = extractor.bounded_subtree_copy("1")

    assert record == {
        "id": "1",
        "methodName": "run",
        "threadId": 7,
        "layer": "",
        "label": "a",
        "status": {
            "recursiveEntryPoint": False,
            "fanOut": False,
            "implementationEntryPoint": False,
        },
        "children": [],
    }


def test_traversals_terminate_on_cycles() -> None:
    store = NodeStore()
    store.add_node(CallNode(id="1", label="f", status={"recursiveEntryPoint": True}))
    store.add_node(CallNode(id="2", label="f"), "1")
    store.link("1", "2")
    store.add_node(CallNode(id="3", label="x"))
    store.add_node(CallNode(id="4", label="y"), "3")
    store.link("3", "4")
    extractor = SubtreePatternExtractor(store)

    view = extractor.compressed_recursive_view("1")
    assert view is not None
    assert view["children"] == []

    copy = extractor.bounded_subtree_copy("3")
    assert copy is not None
    assert _ids(copy) == ["4"]
    assert copy["children"][0]["children"] == []


def test_repeat_visit_in_shared_context_returns_none(session: TraceSession) -> None:
    context = TraversalContext()
    assert session.extractor.bounded_subtree_copy("2", context) is not None
    assert session.extractor.bounded_subtree_copy("2", context) is None


def test_structural_pattern_ignores_ids() -> None:
    first = CallNode.model_validate(call(1, "a", call(2, "b")))
    second = CallNode.model_validate(call(7, "a", call(9, "b")))
    other = CallNode.model_validate(call(7, "a", call(9, "c")))
    renamed = CallNode.model_validate(call(7, "a", call(9, "b", methodName="other")))

    assert structural_pattern(first) == structural_pattern(second)
    assert structural_pattern(first) != structural_pattern(other)
    assert structural_pattern(first) != structural_pattern(renamed)


def test_structural_pattern_treats_special_children_as_leaves() -> None:
    def with_special(grandchild: str) -> CallNode:
        return CallNode.model_validate(
            call(
                1,
                "a",
                call(2, "s", call(3, grandchild), status={"fanOut": True}),
                call(4, "f"),
            )
        )

    assert structural_pattern(with_special("x"), "f") == structural_pattern(with_special("y"), "f")
    assert structural_pattern(with_special("x")) != structural_pattern(with_special("x"), "f")


def test_pattern_keys_do_not_depend_on_export_properties() -> None:
    session = TraceSession(
        {
            "main": recursive(
                1,
                "f",
                call(2, "log", methodName="debug"),
                call(3, "f", call(4, "log", methodName="info"), call(5, "f")),
            )
        },
        config=SessionConfig(export_properties=["label"]),
    )

    view = session.extractor.compressed_recursive_view("1")

    assert view is not None
    assert _ids(view) == ["5", "2", "4"]
    assert [child.get("freq") for child in view["children"][1:]] == [1, 1]
    assert "methodName" not in view["children"][1]


def test_repeat_visit_of_recursive_root_returns_none() -> None:
    session = TraceSession({"main": recursive(1, "f", call(2, "f", call(3, "x")))})
    context = TraversalContext()

    assert session.extractor.bounded_subtree_copy("1", context) is not None
    assert session.extractor.bounded_subtree_copy("1", context) is None
    assert session.extractor.compressed_recursive_view("1", context) is None


def test_path_signature_skips_recursive_children() -> None:
    node = CallNode.model_validate(
        {
            "id": "1",
            "label": "a",
            "children": [
                {"id": "3", "label": "c"},
                {"id": "2", "label": "f"},
                {"id": "4", "label": "b"},
            ],
        }
    )
    assert path_signature(node, "f") == "a[b,c]"
    assert path_signature(CallNode(id="5", label="leaf"), "f") == "leaf"


def test_selected_regions(session: TraceSession) -> None:
    session.selection.select("2")
    session.selection.select("3")
    session.selection.select("4")

    assert session.extractor.find_selected_roots("1") == ["2", "4"]
    region = session.extractor.selected_subtree("2")
    assert region is not None
    assert _ids(region) == ["3"]
    assert session.extractor.selected_subtree("1") is None
