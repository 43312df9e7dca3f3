from __future__ import annotations

from tracestack import PackageSelectionState, TraceSession
from tracestack.core import ThreadIndex


def test_thread_index_rejects_second_owner() -> None:
    threads = ThreadIndex()
    threads.register_thread("a", "1")
    threads.register_thread("b", "2")

    assert threads.add_node_to_thread("a", "1", "pkg") is True
    assert threads.add_node_to_thread("b", "1") is False
    assert threads.get_thread_for_node_id("1") == "a"
    assert threads.get_all_node_ids_for_thread("b") == []
    assert threads.get_packages_for_thread("a") == ["pkg"]
    assert threads.add_node_to_thread("missing", "3") is False


def test_threads_partition_nodes(session: TraceSession) -> None:
    assert session.get_thread_names() == ["main", "worker"]
    assert session.get_all_node_ids_for_thread("main") == ["1", "2", "3", "4"]
    assert session.get_all_node_ids_for_thread("worker") == ["10", "11"]
    assert session.get_thread_for_node_id("11") == "worker"
    assert session.threads.get_thread_root_id("worker") == "10"
    assert session.threads.get_packages_for_thread("main") == ["app", "util"]


def test_package_aggregation_spans_threads(session: TraceSession) -> None:
    package = session.get_package("util")
    assert package is not None
    assert package.total_count == 4
    assert package.node_ids == ["2", "3", "4", "11"]
    assert package.color == "#00f"
    assert session.get_package_color("app") == "#f00"
    assert session.get_package_color("unknown") == ""


def test_package_queries_are_scoped_to_current_thread(session: TraceSession) -> None:
    assert session.get_all_packages() == ["app", "util"]
    assert session.get_package_node_ids("util") == ["2", "3", "4"]

    session.switch_thread("worker")
    assert session.get_all_packages() == ["jobs", "util"]
    assert session.get_package_node_ids("util") == ["11"]


def test_package_selection_tri_state(session: TraceSession) -> None:
    assert session.get_package_selection_state("util") == PackageSelectionState.NONE

    session.selection.select("2")
    assert session.get_package_selection_state("util") == PackageSelectionState.PARTIAL
    assert session.get_package_selected_ids("util") == ["2"]

    session.selection.select("3")
    session.selection.select("4")
    assert session.get_package_selection_state("util") == PackageSelectionState.ALL


def test_other_threads_never_affect_tri_state(session: TraceSession) -> None:
    session.selection.select("11")
    assert session.get_package_selection_state("util") == PackageSelectionState.NONE
    assert session.get_package_selected_ids("util") == []

    session.switch_thread("worker")
    assert session.get_package_selection_state("util") == PackageSelectionState.ALL

    session.switch_thread("main")
    session.selection.select_by_package("util")
    session.selection.deselect("11")
    assert session.get_package_selection_state("util") == PackageSelectionState.ALL


def test_unknown_package_is_none_selected(session: TraceSession) -> None:
    assert session.get_package_selection_state("nope") == PackageSelectionState.NONE
    assert session.get_package_node_ids("nope") == []
