"""Data models for call traces."""

from .call_node import CallNode, StatusFlags
from .state import CompressionSnapshot, PackageSelectionState, StateRecord
from .thread import Package, Thread

__all__ = [
    "CallNode",
    "CompressionSnapshot",
    "Package",
    "PackageSelectionState",
    "StateRecord",
    "StatusFlags",
    "Thread",
]
