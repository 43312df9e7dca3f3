"""Per-node view state and compression snapshots."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .call_node import CallNode


class PackageSelectionState(StrEnum):
    ALL = "all"
    NONE = "none"
    PARTIAL = "partial"


class StateRecord(BaseModel):
    """Mutable view flags kept for every stored node."""

    model_config = ConfigDict(strict=True, extra="ignore")

    selected: bool = False
    expanded: bool = True
    highlighted: bool = False


class CompressionSnapshot(BaseModel):
    """Children of a recursive entry point as they were before compression."""

    model_config = ConfigDict(extra="ignore")

    node_id: str
    children: list[CallNode] = Field(default_factory=list)

    def restore(self) -> list[CallNode]:
        return [child.model_copy(deep=True) for child in self.children]
