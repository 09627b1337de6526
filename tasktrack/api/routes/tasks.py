"""
Task router - listing, CRUD and status changes for the requester's tasks.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tasktrack.api.deps import get_requester, get_task_service
from tasktrack.api.schemas import TaskCreateIn, TaskOut, TaskStatusIn, TaskUpdateIn, envelope
from tasktrack.domain.entities import Requester
from tasktrack.domain.filters import TaskFilters
from tasktrack.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
def list_tasks(
    view: Optional[str] = Query(None),
    task_status: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    requester: Requester = Depends(get_requester),
    service: TaskService = Depends(get_task_service),
):
    """
    List tasks the requester created or is assigned to.

    `view` narrows to `assigned` or `created`; `status` and `priority`
    accept `all` for no filter; `search` matches title or description.
    """
    filters = TaskFilters(view=view, status=task_status, priority=priority, search=search)
    tasks = service.list_tasks(requester, filters)
    return envelope(tasks=[TaskOut.model_validate(task).dump() for task in tasks])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreateIn,
    requester: Requester = Depends(get_requester),
    service: TaskService = Depends(get_task_service),
):
    """Create a task; without an assignee it is assigned to the creator."""
    task = service.create_task(requester, body.to_command())
    return envelope(task=TaskOut.model_validate(task).dump())


@router.get("/{task_id}")
def get_task(
    task_id: int,
    requester: Requester = Depends(get_requester),
    service: TaskService = Depends(get_task_service),
):
    task = service.get_task(requester, task_id)
    return envelope(task=TaskOut.model_validate(task).dump())


@router.put("/{task_id}")
@router.patch("/{task_id}")
def update_task(
    task_id: int,
    body: TaskUpdateIn,
    requester: Requester = Depends(get_requester),
    service: TaskService = Depends(get_task_service),
):
    """
    Update task fields.

    Details and the assignee can only be changed by the creator, the status
    only by the assignee.
    """
    task = service.update_task(requester, task_id, body.to_command())
    return envelope(task=TaskOut.model_validate(task).dump())


@router.patch("/{task_id}/status")
def change_task_status(
    task_id: int,
    body: TaskStatusIn,
    requester: Requester = Depends(get_requester),
    service: TaskService = Depends(get_task_service),
):
    task = service.change_status(requester, task_id, body.status)
    return envelope(
        message=f"Task marked as {task.status.value}",
        task=TaskOut.model_validate(task).dump(),
    )


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    requester: Requester = Depends(get_requester),
    service: TaskService = Depends(get_task_service),
):
    service.delete_task(requester, task_id)
    return envelope(message="Task deleted successfully")
