from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

from .commands import CreateTask
from .entities import TaskEntity
from .enums import TaskStatus


def new_task_fields(command: CreateTask, creator_id: int, now: datetime) -> dict[str, Any]:
    """Insert values for a new task; the assignee defaults to the creator."""
    status = command.status or TaskStatus.ACTIVE
    return {
        "title": command.title,
        "description": command.description,
        "priority": command.priority,
        "status": status,
        "due_date": command.due_date,
        "tags": list(command.tags),
        "creator_id": creator_id,
        "assignee_id": command.assignee_id or creator_id,
        "completed_at": now if status == TaskStatus.COMPLETED else None,
    }


def apply_status_change(task: TaskEntity, new_status: TaskStatus, now: datetime) -> TaskEntity:
    """Return ``task`` moved to ``new_status`` with ``completed_at`` kept in sync.

    Setting the current status again returns the same object untouched.
    """
    if task.status == new_status:
        return task
    if new_status == TaskStatus.COMPLETED:
        return replace(task, status=new_status, completed_at=task.completed_at or now)
    return replace(task, status=new_status, completed_at=None)


def status_patch(task: TaskEntity, new_status: TaskStatus, now: datetime) -> dict[str, Any]:
    """Store patch for a status change; empty when nothing changes."""
    moved = apply_status_change(task, new_status, now)
    if moved is task:
        return {}
    return {"status": moved.status, "completed_at": moved.completed_at}
