"""Serialization helpers."""

from .json import (
    export_to_json,
    load_threads_json,
    save_export_json,
    save_threads_json,
    threads_from_json,
    threads_to_json,
)

__all__ = [
    "export_to_json",
    "load_threads_json",
    "save_export_json",
    "save_threads_json",
    "threads_from_json",
    "threads_to_json",
]
