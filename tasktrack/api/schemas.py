"""Request and response models.

Request models map camelCase or snake_case keys onto the domain commands;
field types and constraints are declared on the commands themselves.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tasktrack.domain.commands import ChangePassword, CreateTask, RegisterUser, UpdateProfile, UpdateTask
from tasktrack.domain.enums import TaskPriority, TaskStatus

ASSIGNEE_ALIASES = AliasChoices("assigneeId", "assignedTo", "assignee_id")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskFieldsIn(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = None
    tags: Optional[List[str]] = None
    assignee_id: Optional[int] = Field(None, validation_alias=ASSIGNEE_ALIASES)

    def _payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TaskCreateIn(TaskFieldsIn):
    def to_command(self) -> CreateTask:
        return CreateTask.from_payload(self._payload())


class TaskUpdateIn(TaskFieldsIn):
    def to_command(self) -> UpdateTask:
        return UpdateTask.from_payload(self._payload())


class TaskStatusIn(CamelModel):
    status: Optional[str] = None


class RegisterIn(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    def to_command(self) -> RegisterUser:
        return RegisterUser.from_payload(self.model_dump())


class LoginIn(CamelModel):
    email: str = ""
    password: str = ""


class RefreshIn(CamelModel):
    refresh_token: Optional[str] = None


class ProfileUpdateIn(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    def to_command(self) -> UpdateProfile:
        return UpdateProfile.from_payload(self.model_dump(exclude_unset=True))


class PasswordChangeIn(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None

    def to_command(self) -> ChangePassword:
        return ChangePassword.from_payload(self.model_dump())


class OutModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class UserRefOut(OutModel):
    id: int
    first_name: str
    last_name: str
    email: str


class UserOut(UserRefOut):
    created_at: datetime


class ProfileOut(UserOut):
    tasks_completed: int
    active_tasks: int


class TaskOut(OutModel):
    id: int
    title: str
    description: str
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[date] = None
    tags: List[str]
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    creator: Optional[UserRefOut] = None
    assignee: Optional[UserRefOut] = None


def envelope(message: Optional[str] = None, **data: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data:
        body["data"] = data
    return body
