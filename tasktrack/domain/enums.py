from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskView(StrEnum):
    ALL = "all"
    ASSIGNED = "assigned"
    CREATED = "created"


class TaskAction(StrEnum):
    VIEW = "view"
    EDIT_DETAILS = "edit_details"
    REASSIGN = "reassign"
    CHANGE_STATUS = "change_status"
    DELETE = "delete"
