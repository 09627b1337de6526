"""Typed input for each mutating action.

Commands are frozen pydantic models. Every command is built through
``from_payload`` which validates the raw mapping once and either returns the
command or raises :class:`ValidationError` (or :class:`InvalidStatus` for
status values). Services consume commands only, never raw dictionaries.
"""

from __future__ import annotations

from datetime import date
from types import MappingProxyType
from typing import Annotated, Any, Mapping, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PositiveInt,
    StringConstraints,
    TypeAdapter,
    field_validator,
)
from pydantic import ValidationError as SchemaError

from .enums import TaskPriority, TaskStatus
from .errors import InvalidStatus, TaskTrackError, ValidationError

TITLE_MAX = 200
DESCRIPTION_MAX = 1000
TAG_MAX = 30
NAME_MAX = 50
PASSWORD_MIN = 8

STATUS_MESSAGE = "Invalid status. Must be active or completed"

DETAIL_FIELDS = frozenset({"title", "description", "priority", "due_date", "tags"})


def _fold_case(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TITLE_MAX)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=DESCRIPTION_MAX)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=TAG_MAX)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=r"^\S+@\S+\.\S+$")]
Priority = Annotated[TaskPriority, BeforeValidator(_fold_case)]
Status = Annotated[TaskStatus, BeforeValidator(_fold_case)]

_PRIORITY = TypeAdapter(Priority)
_STATUS = TypeAdapter(Status)
_EMAIL = TypeAdapter(Email)


def _domain_error(exc: SchemaError) -> TaskTrackError:
    errors = exc.errors(include_url=False)
    unknown = sorted(str(error["loc"][0]) for error in errors if error["type"] == "extra_forbidden")
    if unknown:
        return ValidationError("Unknown fields", details={"fields": unknown})

    for error in errors:
        if error["loc"] and error["loc"][0] == "status":
            return InvalidStatus(STATUS_MESSAGE, details={"value": error.get("input")})

    fields = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in errors
    ]
    first = fields[0]
    return ValidationError(f"{first['field']}: {first['message']}", details={"errors": fields})


def parse_priority(value: Any) -> TaskPriority:
    try:
        return _PRIORITY.validate_python(value)
    except SchemaError:
        raise ValidationError(
            "Invalid priority. Must be low, medium or high",
            details={"field": "priority", "value": value},
        ) from None


def parse_status(value: Any) -> TaskStatus:
    try:
        return _STATUS.validate_python(value)
    except SchemaError:
        raise InvalidStatus(STATUS_MESSAGE, details={"value": value}) from None


def normalize_email(value: Any) -> str:
    try:
        return _EMAIL.validate_python(value)
    except SchemaError:
        raise ValidationError("Valid email is required", details={"field": "email"}) from None


class Command(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]):
        try:
            return cls.model_validate(dict(data))
        except SchemaError as exc:
            raise _domain_error(exc) from None


class _TaskFields(Command):
    """Field rules shared by task creation and task updates."""

    title: Optional[Title] = None
    description: Optional[Description] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    due_date: Optional[date] = None
    tags: Optional[tuple[Tag, ...]] = None
    assignee_id: Optional[PositiveInt] = None

    @field_validator("title", "priority", "status", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("cannot be null")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date(cls, value: Any) -> Any:
        return None if value == "" else value

    @field_validator("tags", mode="before")
    @classmethod
    def no_tags(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("tags")
    @classmethod
    def drop_empty_tags(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(tag for tag in value if tag)


class CreateTask(_TaskFields):
    title: Title
    description: Description = ""
    priority: Priority = TaskPriority.MEDIUM
    status: Status = TaskStatus.ACTIVE
    tags: tuple[Tag, ...] = ()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CreateTask":
        # null means "use the default" for these on creation
        defaults = ("assignee_id", "priority", "status")
        return super().from_payload({
            key: value for key, value in data.items() if not (value is None and key in defaults)
        })


class UpdateTask(_TaskFields):
    """Partial update; only the fields that were sent are touched."""

    @property
    def changes(self) -> Mapping[str, Any]:
        changes = {name: getattr(self, name) for name in self.model_fields_set}
        if "assignee_id" in changes and changes["assignee_id"] is None:
            del changes["assignee_id"]
        return MappingProxyType(changes)

    @property
    def detail_changes(self) -> dict[str, Any]:
        return {key: value for key, value in self.changes.items() if key in DETAIL_FIELDS}

    def is_empty(self) -> bool:
        return not self.changes


class RegisterUser(Command):
    first_name: Name
    last_name: Name
    email: Email
    password: str = Field(min_length=PASSWORD_MIN, repr=False)


class UpdateProfile(Command):
    first_name: Optional[Name] = None
    last_name: Optional[Name] = None
    email: Optional[Email] = None

    @field_validator("first_name", "last_name", "email", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("cannot be null")
        return value

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UpdateProfile":
        if "password" in data:
            raise ValidationError(
                "Password is changed through the password endpoint",
                details={"field": "password"},
            )
        return super().from_payload(data)

    @property
    def changes(self) -> Mapping[str, Any]:
        return MappingProxyType({name: getattr(self, name) for name in self.model_fields_set})


class ChangePassword(Command):
    current_password: str = Field(min_length=1, repr=False)
    new_password: str = Field(min_length=PASSWORD_MIN, repr=False)
