"""Aggregation of nodes by package name."""

from __future__ import annotations

from collections.abc import Iterator

from ..models import CallNode, Package, PackageSelectionState
from .state_index import StateIndex
from .threads import ThreadIndex


class PackageAggregator:
    """Package membership and selected subsets.

    Membership spans every thread, but the query helpers only report members
    of the current thread since the view shows one thread at a time.
    """

    def __init__(self, threads: ThreadIndex, states: StateIndex) -> None:
        self._threads = threads
        self._states = states
        self._packages: dict[str, Package] = {}

    def add_node(self, node: CallNode) -> None:
        if not node.package_name:
            return
        package = self._packages.get(node.package_name)
        if package is None:
            package = Package(name=node.package_name, color=node.color)
            self._packages[node.package_name] = package
        package.total_count += 1
        if not package.color and node.color:
            package.color = node.color
        package.node_ids.append(node.id)
        if self._states.is_selected(node.id):
            package.selected_ids.append(node.id)

    def update_node_selection(self, package_name: str, node_id: str, selected: bool) -> None:
        package = self._packages.get(package_name)
        if package is None or node_id not in package.node_ids:
            return
        if selected:
            if node_id not in package.selected_ids:
                package.selected_ids.append(node_id)
        elif node_id in package.selected_ids:
            package.selected_ids.remove(node_id)

    def get_selection_state(self, package_name: str) -> PackageSelectionState:
        members = self.get_package_node_ids(package_name)
        selected = sum(1 for node_id in members if self._states.is_selected(node_id))
        if not members or selected == 0:
            return PackageSelectionState.NONE
        if selected == len(members):
            return PackageSelectionState.ALL
        return PackageSelectionState.PARTIAL

    def get_package(self, package_name: str) -> Package | None:
        return self._packages.get(package_name)

    def get_all_packages(self) -> list[str]:
        return self._threads.get_packages_for_thread(self._threads.current_thread_name)

    def get_package_color(self, package_name: str) -> str:
        package = self._packages.get(package_name)
        return package.color if package is not None else ""

    def get_package_node_ids(self, package_name: str) -> list[str]:
        return self._in_current_thread(package_name, selected_only=False)

    def get_package_selected_ids(self, package_name: str) -> list[str]:
        return self._in_current_thread(package_name, selected_only=True)

    def _in_current_thread(self, package_name: str, *, selected_only: bool) -> list[str]:
        current = self._threads.current_thread_name
        package = self._packages.get(package_name)
        if current is None or package is None:
            return []
        ids = package.selected_ids if selected_only else package.node_ids
        return [
            node_id for node_id in ids if self._threads.get_thread_for_node_id(node_id) == current
        ]

    def clear(self) -> None:
        self._packages.clear()

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())
