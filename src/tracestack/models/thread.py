"""Thread partition and package aggregation records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Thread(BaseModel):
    """One call tree of the trace and the ids reachable from its root."""

    model_config = ConfigDict(strict=True, extra="ignore")

    name: str
    root_id: str
    node_ids: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)


class Package(BaseModel):
    """Nodes sharing a package name, across all threads."""

    model_config = ConfigDict(strict=True, extra="ignore")

    name: str
    total_count: int = 0
    color: str = ""
    node_ids: list[str] = Field(default_factory=list)
    selected_ids: list[str] = Field(default_factory=list)
