"""Configuration for a TraceSession instance."""

from __future__ import annotations

from pydantic import BaseModel

DEFAULT_EXPORT_PROPERTIES = [
    "id",
    "label",
    "methodName",
    "className",
    "time",
    "percent",
    "sourceCode",
    "docComment",
    "description",
    "layer",
    "color",
    "collapsed",
]


class SessionConfig(BaseModel):
    """Validated configuration for a TraceSession. Passed via DI at construction."""

    export_properties: list[str] = list(DEFAULT_EXPORT_PROPERTIES)
    default_thread: str | None = None
