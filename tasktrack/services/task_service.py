from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from tasktrack.domain.commands import DETAIL_FIELDS, CreateTask, UpdateTask, parse_status
from tasktrack.domain.entities import Requester, TaskEntity
from tasktrack.domain.enums import TaskAction, TaskStatus
from tasktrack.domain.errors import InvalidAssignee, NotFound, Unauthenticated
from tasktrack.domain.filters import TaskFilters
from tasktrack.domain.lifecycle import new_task_fields, status_patch
from tasktrack.domain.policy import can_perform
from tasktrack.domain.query import build_task_query
from tasktrack.infra.models import utcnow
from tasktrack.infra.repository import TaskRepository, UserRepository

logger = logging.getLogger(__name__)


def _requester_id(requester: Requester | None) -> int:
    if requester is None or not requester.is_active:
        raise Unauthenticated()
    return requester.user_id


class TaskService:
    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._tasks = tasks
        self._users = users
        self._clock = clock

    def list_tasks(self, requester: Requester, filters: TaskFilters) -> list[TaskEntity]:
        query = build_task_query(_requester_id(requester), filters)
        return self._tasks.find(query)

    def get_task(self, requester: Requester, task_id: int) -> TaskEntity:
        return self._locate(_requester_id(requester), task_id)

    def create_task(self, requester: Requester, command: CreateTask) -> TaskEntity:
        creator_id = _requester_id(requester)
        if command.assignee_id is not None and command.assignee_id != creator_id:
            assignee = self._users.get(command.assignee_id)
            if assignee is None or not assignee.is_active:
                logger.warning(
                    "User %s tried to assign a task to unknown or inactive user %s",
                    creator_id, command.assignee_id,
                )
                raise InvalidAssignee()

        task = self._tasks.insert(new_task_fields(command, creator_id, self._clock()))
        logger.info("Task %s created by user %s, assigned to %s", task.id, creator_id, task.assignee_id)
        return task

    def update_task(self, requester: Requester, task_id: int, command: UpdateTask) -> TaskEntity:
        """Apply the fields of ``command`` that differ from the stored task.

        Each kind of change needs its own permission: detail fields need
        ``edit_details``, a new assignee needs ``reassign`` and a new status
        needs ``change_status``. Every check runs before anything is written.
        """
        user_id = _requester_id(requester)
        task = self._locate(user_id, task_id)

        changes = {
            key: value
            for key, value in command.changes.items()
            if getattr(task, key) != value
        }
        if not changes:
            return task

        if DETAIL_FIELDS.intersection(changes):
            self._require(user_id, task, TaskAction.EDIT_DETAILS)
        if "assignee_id" in changes:
            new_assignee = self._users.get(changes["assignee_id"])
            self._require(user_id, task, TaskAction.REASSIGN, new_assignee=new_assignee)
        if "status" in changes:
            self._require(user_id, task, TaskAction.CHANGE_STATUS, new_status=changes["status"])

        patch: dict[str, Any] = {key: value for key, value in changes.items() if key != "status"}
        if "status" in changes:
            patch.update(status_patch(task, changes["status"], self._clock()))

        updated = self._tasks.update(task.id, patch)
        if updated is None:
            raise NotFound("Task not found")
        logger.info("Task %s updated by user %s: %s", task.id, user_id, ", ".join(sorted(changes)))
        return updated

    def change_status(self, requester: Requester, task_id: int, status: Any) -> TaskEntity:
        user_id = _requester_id(requester)
        new_status = parse_status(status)
        task = self._locate(user_id, task_id)
        if task.assignee_id != user_id:
            logger.warning("User %s is not the assignee of task %s", user_id, task_id)
            raise NotFound("Task not found or you are not assigned to this task")
        self._require(user_id, task, TaskAction.CHANGE_STATUS, new_status=new_status)

        patch = status_patch(task, new_status, self._clock())
        if not patch:
            return task
        updated = self._tasks.update(task.id, patch)
        if updated is None:
            raise NotFound("Task not found")
        logger.info("Task %s marked as %s by user %s", task.id, new_status, user_id)
        return updated

    def delete_task(self, requester: Requester, task_id: int) -> None:
        user_id = _requester_id(requester)
        task = self._locate(user_id, task_id)
        if task.creator_id != user_id:
            logger.warning("User %s tried to delete task %s they did not create", user_id, task_id)
            raise NotFound("Task not found or access denied")
        self._require(user_id, task, TaskAction.DELETE)
        if not self._tasks.delete(task.id):
            raise NotFound("Task not found")
        logger.info("Task %s deleted by user %s", task.id, user_id)

    def task_counts(self, user_id: int) -> dict[str, int]:
        return {
            "completed": self._tasks.count_for_assignee(user_id, TaskStatus.COMPLETED),
            "active": self._tasks.count_for_assignee(user_id, TaskStatus.ACTIVE),
        }

    def _locate(self, user_id: int, task_id: int) -> TaskEntity:
        """Fetch a task within the requester's view scope.

        Absent tasks and tasks outside the scope raise the same ``NotFound``.
        """
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFound("Task not found")
        self._require(user_id, task, TaskAction.VIEW)
        return task

    @staticmethod
    def _require(user_id: int, task: TaskEntity, action: TaskAction, **context: Any) -> None:
        decision = can_perform(user_id, task, action, **context)
        if not decision:
            logger.warning(
                "Denied %s on task %s for user %s: %s",
                action, task.id, user_id, decision.reason.code,
            )
            decision.raise_for_denial()
