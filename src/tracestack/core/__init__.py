"""Trace tree state model and recursive-call compression."""

from .events import ChangeEvent, EventBus, EventType
from .node_store import NodeStore
from .packages import PackageAggregator
from .patterns import (
    RECURSION_EXIT_TAG,
    RECURSIVE_SUBTREE_TAG,
    SubtreePatternExtractor,
    TraversalContext,
    path_signature,
    structural_pattern,
)
from .selection import SelectionCoordinator
from .session import TraceSession
from .session_config import DEFAULT_EXPORT_PROPERTIES, SessionConfig
from .state_index import StateIndex
from .threads import ThreadIndex
from .tree_ops import TreeOperations

__all__ = [
    "DEFAULT_EXPORT_PROPERTIES",
    "RECURSION_EXIT_TAG",
    "RECURSIVE_SUBTREE_TAG",
    "ChangeEvent",
    "EventBus",
    "EventType",
    "NodeStore",
    "PackageAggregator",
    "SelectionCoordinator",
    "SessionConfig",
    "StateIndex",
    "SubtreePatternExtractor",
    "ThreadIndex",
    "TraceSession",
    "TraversalContext",
    "TreeOperations",
    "path_signature",
    "structural_pattern",
]
