"""Trace file loading shared by the subcommands."""

from __future__ import annotations

import sys
from pathlib import Path

from ..core import SessionConfig, TraceSession
from ..exceptions import TracestackLoadError
from ..serializers import load_threads_json


def open_session(trace_file: Path, thread: str | None) -> TraceSession | None:
    """Load ``trace_file`` into a session, printing the failure to stderr."""
    try:
        threads = load_threads_json(trace_file)
    except FileNotFoundError:
        print(f"Error: file not found: {trace_file}", file=sys.stderr)
        return None
    except TracestackLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None
    except OSError as exc:
        print(f"Error reading file: {exc}", file=sys.stderr)
        return None

    if thread is not None and thread not in threads:
        print(f"Error: thread not found: {thread}", file=sys.stderr)
        return None
    return TraceSession(threads, config=SessionConfig(default_thread=thread))
