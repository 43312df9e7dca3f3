"""tracestack: call-trace tree state model with recursive-call compression.

    from tracestack import TraceSession, load_threads_json

    session = TraceSession(load_threads_json("trace.json"))
    session.selection.select_all_children(root_id)
    session.tree.compress(entry_id)
    record = session.extractor.bounded_subtree_copy(entry_id)
"""

from __future__ import annotations

from .core import ChangeEvent, EventBus, EventType, SessionConfig, TraceSession
from .exceptions import TracestackError, TracestackLoadError
from .models import CallNode, PackageSelectionState, StatusFlags
from .serializers import load_threads_json, save_export_json, threads_from_json

__all__ = [
    "CallNode",
    "ChangeEvent",
    "EventBus",
    "EventType",
    "PackageSelectionState",
    "SessionConfig",
    "StatusFlags",
    "TraceSession",
    "TracestackError",
    "TracestackLoadError",
    "load_threads_json",
    "save_export_json",
    "threads_from_json",
]
