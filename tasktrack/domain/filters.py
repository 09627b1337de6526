from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TaskFilters:
    view: str | None = "all"
    status: str | None = None
    priority: str | None = None
    search: str | None = None
