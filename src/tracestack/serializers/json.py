"""JSON serialization helpers for call forests and export records."""

from __future__ import annotations

import json
import warnings
from collections.abc import Mapping
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ..exceptions import TracestackLoadError
from ..models import CallNode

_THREADS_ADAPTER = TypeAdapter(dict[str, CallNode])


def threads_to_json(threads: Mapping[str, CallNode], *, indent: int | None = 2) -> str:
    return _THREADS_ADAPTER.dump_json(dict(threads), indent=indent, by_alias=True).decode("utf-8")


def threads_from_json(payload: str | bytes) -> dict[str, CallNode]:
    """Parse a ``{thread name: root call node}`` JSON document.

    Raises ``TracestackLoadError`` on invalid or unparseable input.
    Threads whose root has no id are skipped with a warning.
    """
    try:
        raw = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TracestackLoadError(f"Failed to parse trace JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise TracestackLoadError(
            "Failed to parse trace JSON: expected an object mapping thread names to call trees"
        )

    threads: dict[str, CallNode] = {}
    for name, root in raw.items():
        if not isinstance(root, dict) or root.get("id") in (None, ""):
            warnings.warn(f"tracestack: thread {name!r} has no root id; skipped", stacklevel=2)
            continue
        try:
            threads[name] = CallNode.model_validate(root)
        except ValidationError as exc:
            raise TracestackLoadError(
                f"Failed to parse trace JSON: thread {name!r}: {exc}"
            ) from exc
    return threads


def save_threads_json(
    threads: Mapping[str, CallNode],
    path: str | Path,
    *,
    indent: int | None = 2,
) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(threads_to_json(threads, indent=indent), encoding="utf-8")
    return output_path


def load_threads_json(path: str | Path) -> dict[str, CallNode]:
    """Load a call forest from a JSON file.

    Raises ``TracestackLoadError`` on invalid content,
    or ``FileNotFoundError`` / ``OSError`` if the file is inaccessible.
    """
    payload = Path(path).read_text(encoding="utf-8")
    return threads_from_json(payload)


def export_to_json(record: Mapping[str, object] | None, *, indent: int | None = 2) -> str:
    return json.dumps(record, indent=indent, ensure_ascii=False, default=str)


def save_export_json(
    record: Mapping[str, object] | None,
    path: str | Path,
    *,
    indent: int | None = 2,
) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(export_to_json(record, indent=indent) + "\n", encoding="utf-8")
    return output_path
