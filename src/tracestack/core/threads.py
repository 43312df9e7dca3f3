"""Partition of node ids by owning thread."""

from __future__ import annotations

from ..models import Thread


class ThreadIndex:
    """Tracks which thread every node belongs to and the packages seen per thread."""

    def __init__(self) -> None:
        self._threads: dict[str, Thread] = {}
        self._node_to_thread: dict[str, str] = {}
        self.current_thread_name: str | None = None

    def register_thread(self, name: str, root_id: str) -> Thread:
        thread = Thread(name=name, root_id=root_id)
        self._threads[name] = thread
        return thread

    def has_thread(self, name: str) -> bool:
        return name in self._threads

    def add_node_to_thread(self, name: str, node_id: str, package_name: str | None = None) -> bool:
        thread = self._threads.get(name)
        if thread is None or node_id in self._node_to_thread:
            return False
        self._node_to_thread[node_id] = name
        thread.node_ids.append(node_id)
        if package_name and package_name not in thread.packages:
            thread.packages.append(package_name)
        return True

    def get_thread(self, name: str) -> Thread | None:
        return self._threads.get(name)

    def get_thread_for_node_id(self, node_id: str) -> str | None:
        return self._node_to_thread.get(node_id)

    def get_all_node_ids_for_thread(self, name: str | None) -> list[str]:
        thread = self._threads.get(name) if name is not None else None
        return list(thread.node_ids) if thread is not None else []

    def get_thread_root_id(self, name: str) -> str | None:
        thread = self._threads.get(name)
        return thread.root_id if thread is not None else None

    def get_packages_for_thread(self, name: str | None) -> list[str]:
        thread = self._threads.get(name) if name is not None else None
        return list(thread.packages) if thread is not None else []

    def get_thread_names(self) -> list[str]:
        return list(self._threads)

    def set_current_thread(self, name: str) -> bool:
        if name not in self._threads:
            return False
        self.current_thread_name = name
        return True

    def clear(self) -> None:
        self._threads.clear()
        self._node_to_thread.clear()
        self.current_thread_name = None
