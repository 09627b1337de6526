"""Error taxonomy shared by the services and the HTTP boundary."""

from __future__ import annotations

from typing import Any, Dict, Optional


class TaskTrackError(Exception):
    """Base class for expected, caller-caused failures."""

    code = "error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class Unauthenticated(TaskTrackError):
    code = "unauthenticated"
    default_message = "Authentication required"


class InvalidCredentials(TaskTrackError):
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class ValidationError(TaskTrackError):
    code = "validation_error"
    default_message = "Validation failed"


class NotFound(TaskTrackError):
    code = "not_found"
    default_message = "Resource not found"


class Forbidden(TaskTrackError):
    code = "forbidden"
    default_message = "Action not permitted"


class InvalidAssignee(TaskTrackError):
    code = "invalid_assignee"
    default_message = "Assigned user not found or inactive"


class InvalidStatus(TaskTrackError):
    code = "invalid_status"
    default_message = "Invalid status"


class Conflict(TaskTrackError):
    code = "conflict"
    default_message = "Resource already exists"
