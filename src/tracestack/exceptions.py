"""Public exception types for tracestack."""

from __future__ import annotations


class TracestackError(Exception):
    """Base class for all tracestack exceptions."""


class TracestackLoadError(TracestackError):
    """Raised when a trace file cannot be loaded or parsed."""
