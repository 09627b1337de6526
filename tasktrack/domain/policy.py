"""Who may do what to a task.

``can_perform`` is a pure decision function over the requester id, the task
and the action. It never touches a store; callers pass in whatever it needs
(the proposed assignee, the proposed status) and turn a denial into an
exception with :meth:`Decision.raise_for_denial`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .entities import TaskEntity, UserEntity
from .enums import TaskAction, TaskStatus
from .errors import Forbidden, InvalidAssignee, InvalidStatus, NotFound, TaskTrackError

CREATOR_ONLY = frozenset({TaskAction.EDIT_DETAILS, TaskAction.REASSIGN, TaskAction.DELETE})

_DENIAL_MESSAGES = {
    TaskAction.EDIT_DETAILS: "Only the task creator can edit task details",
    TaskAction.REASSIGN: "Only the task creator can change the assignee",
    TaskAction.CHANGE_STATUS: "Only the assignee can change the task status",
    TaskAction.DELETE: "Only the task creator can delete the task",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: type[TaskTrackError] | None = None
    message: str | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: type[TaskTrackError], message: str | None = None) -> "Decision":
        return cls(False, reason, message)

    def __bool__(self) -> bool:
        return self.allowed

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise self.reason(self.message)


def can_perform(
    requester_id: int,
    task: TaskEntity,
    action: TaskAction,
    *,
    new_assignee: UserEntity | None = None,
    new_status: Any = None,
) -> Decision:
    """Decide whether ``requester_id`` may perform ``action`` on ``task``.

    A requester who is neither creator nor assignee is denied with
    ``NotFound`` for every action, so a denial never reveals that the task
    exists. Inside that scope, relationship mismatches are ``Forbidden``.

    ``reassign`` additionally requires ``new_assignee`` to be an existing,
    active user (``None`` means the lookup found nobody), and
    ``change_status`` requires ``new_status`` to be a member of
    :class:`TaskStatus`.
    """
    if not task.involves(requester_id):
        return Decision.deny(NotFound, "Task not found")

    if action is TaskAction.VIEW:
        return Decision.allow()

    if action in CREATOR_ONLY and requester_id != task.creator_id:
        return Decision.deny(Forbidden, _DENIAL_MESSAGES[action])

    if action is TaskAction.REASSIGN:
        if new_assignee is None or not new_assignee.is_active:
            return Decision.deny(InvalidAssignee, "Assigned user not found or inactive")
        return Decision.allow()

    if action is TaskAction.CHANGE_STATUS:
        if requester_id != task.assignee_id:
            return Decision.deny(Forbidden, _DENIAL_MESSAGES[action])
        if new_status not in tuple(TaskStatus):
            return Decision.deny(InvalidStatus, "Invalid status. Must be active or completed")
        return Decision.allow()

    return Decision.allow()
