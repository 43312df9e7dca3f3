"""Call node model and status flags."""

from __future__ import annotations

import warnings
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StatusFlags(BaseModel):
    """Node categories assigned by an external classifier pass."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    recursive_entry_point: bool = Field(default=False, alias="recursiveEntryPoint")
    fan_out: bool = Field(default=False, alias="fanOut")
    implementation_entry_point: bool = Field(default=False, alias="implementationEntryPoint")

    @property
    def is_special(self) -> bool:
        return self.recursive_entry_point or self.fan_out or self.implementation_entry_point


class CallNode(BaseModel):
    """Single method invocation in a thread's call tree.

    Incoming records use camelCase keys (``packageName``, ``sourceCode`` ...);
    keys with no dedicated field are kept in ``attributes``. Children without
    an id are dropped with a warning so their siblings still load.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    label: str = ""
    children: list[CallNode] = Field(default_factory=list)
    package_name: str | None = Field(default=None, alias="packageName")
    color: str = ""
    method_name: str | None = Field(default=None, alias="methodName")
    class_name: str | None = Field(default=None, alias="className")
    description: str | None = None
    time: str | float | None = None
    percent: str | float | None = None
    source_code: str | None = Field(default=None, alias="sourceCode")
    doc_comment: str | None = Field(default=None, alias="docComment")
    layer: str | None = None
    attributes: dict[str, object] = Field(default_factory=dict)
    status: StatusFlags = Field(default_factory=StatusFlags)
    selected: bool = False
    collapsed: bool = False
    compressed: bool = False
    is_exit: bool = Field(default=False, alias="isExit")
    freq: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_record(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        record = dict(data)
        node_id = record.get("id")
        if isinstance(node_id, int) and not isinstance(node_id, bool):
            record["id"] = str(node_id)

        children = record.get("children")
        if isinstance(children, list) and children:
            kept: list[object] = []
            for child in children:
                if isinstance(child, CallNode) or (
                    isinstance(child, dict) and child.get("id") not in (None, "")
                ):
                    kept.append(child)
                else:
                    warnings.warn(
                        f"tracestack: skipping call node without id under {record.get('id')!r}",
                        stacklevel=2,
                    )
            record["children"] = kept

        known = set(cls.model_fields)
        known.update(field.alias for field in cls.model_fields.values() if field.alias)
        extras = {key: record.pop(key) for key in list(record) if key not in known}
        if extras:
            attributes = dict(record.get("attributes") or {})
            attributes.update(extras)
            record["attributes"] = attributes
        return record

    @property
    def is_special(self) -> bool:
        return self.status.is_special

    def numeric_id(self) -> tuple[int, int | str]:
        """Sort key ordering numeric ids numerically, others after them."""
        try:
            return (0, int(self.id))
        except ValueError:
            return (1, self.id)
