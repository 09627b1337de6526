from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class UserEntity:
    id: int
    first_name: str
    last_name: str
    email: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    password_hash: str = field(default="", repr=False, compare=False)


@dataclass(frozen=True)
class UserRef:
    """Public slice of a user nested into task view-models."""

    id: int
    first_name: str
    last_name: str
    email: str

    @classmethod
    def of(cls, user: UserEntity) -> "UserRef":
        return cls(id=user.id, first_name=user.first_name, last_name=user.last_name, email=user.email)


@dataclass(frozen=True)
class TaskEntity:
    id: int | None
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date]
    tags: tuple[str, ...]
    creator_id: int
    assignee_id: int
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]
    creator: UserRef | None = None
    assignee: UserRef | None = None

    def involves(self, user_id: int) -> bool:
        return user_id in (self.creator_id, self.assignee_id)


@dataclass(frozen=True)
class Requester:
    """Identity resolved from a verified access token."""

    user_id: int
    is_active: bool = True
