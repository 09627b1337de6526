"""Translate a list request into a store-agnostic task query.

The query always carries a view scope tied to the requester, so a list can
never include tasks the requester neither created nor is assigned to. Free
text search is ANDed with that scope.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .entities import TaskEntity
from .enums import TaskPriority, TaskStatus, TaskView
from .errors import ValidationError
from .filters import TaskFilters
from .commands import parse_priority, parse_status

ANY = "all"


def fold_text(text: str | None) -> str:
    """Case folding shared by the in-memory match and the stored search columns."""
    return (text or "").lower()


@dataclass(frozen=True)
class TaskQuery:
    requester_id: int
    view: TaskView
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = None

    def in_scope(self, task: TaskEntity) -> bool:
        if self.view is TaskView.ASSIGNED:
            return task.assignee_id == self.requester_id
        if self.view is TaskView.CREATED:
            return task.creator_id == self.requester_id
        return task.involves(self.requester_id)

    def matches(self, task: TaskEntity) -> bool:
        if not self.in_scope(task):
            return False
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.search:
            needle = fold_text(self.search)
            haystacks = (fold_text(task.title), fold_text(task.description))
            if not any(needle in text for text in haystacks):
                return False
        return True

    def order(self, tasks: list[TaskEntity]) -> list[TaskEntity]:
        """Newest created first, ties broken by the higher id."""
        return sorted(
            tasks,
            key=lambda task: (task.created_at or datetime.min, task.id or 0),
            reverse=True,
        )


def _is_unset(value: str | None) -> bool:
    return value is None or value.strip() == "" or value.strip().lower() == ANY


def _parse_view(value: str | None) -> TaskView:
    if value is None or not value.strip():
        return TaskView.ALL
    try:
        return TaskView(value.strip().lower())
    except ValueError:
        raise ValidationError(
            "Invalid view. Must be all, assigned or created",
            details={"field": "view", "value": value},
        ) from None


def build_task_query(requester_id: int, filters: TaskFilters) -> TaskQuery:
    status = None if _is_unset(filters.status) else parse_status(filters.status)
    priority = None if _is_unset(filters.priority) else parse_priority(filters.priority)
    search = (filters.search or "").strip() or None
    return TaskQuery(
        requester_id=requester_id,
        view=_parse_view(filters.view),
        status=status,
        priority=priority,
        search=search,
    )
