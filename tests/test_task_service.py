from __future__ import annotations

import pytest

from tasktrack.domain.commands import CreateTask, UpdateTask
from tasktrack.domain.entities import Requester
from tasktrack.domain.enums import TaskPriority, TaskStatus
from tasktrack.domain.errors import Forbidden, InvalidAssignee, InvalidStatus, NotFound, Unauthenticated
from tasktrack.domain.filters import TaskFilters

CAROL_ID = 3


def _create(service, requester, **fields):
    fields.setdefault("title", "Write report")
    return service.create_task(requester, CreateTask.from_payload(fields))


def test_task_without_assignee_is_assigned_to_creator(service, alice) -> None:
    task = _create(service, alice)

    assert task.creator_id == alice.user_id
    assert task.assignee_id == alice.user_id
    assert task.status == TaskStatus.ACTIVE
    assert task.completed_at is None
    assert task.assignee.email == "alice@example.com"


def test_create_rejects_inactive_or_unknown_assignee(service, tasks, alice) -> None:
    with pytest.raises(InvalidAssignee):
        _create(service, alice, assignee_id=CAROL_ID)
    with pytest.raises(InvalidAssignee):
        _create(service, alice, assignee_id=99)
    assert tasks.tasks == {}


def test_create_requires_identity(service) -> None:
    with pytest.raises(Unauthenticated):
        _create(service, None)
    with pytest.raises(Unauthenticated):
        _create(service, Requester(user_id=1, is_active=False))


def test_assignee_completes_delegated_task(service, clock, alice, bob) -> None:
    task = _create(service, alice, assignee_id=bob.user_id)
    done_at = clock.advance(hours=2)

    completed = service.change_status(bob, task.id, "completed")

    assert completed.status == TaskStatus.COMPLETED
    assert completed.completed_at == done_at


def test_creator_cannot_change_status_of_delegated_task(service, tasks, alice, bob) -> None:
    task = _create(service, alice, assignee_id=bob.user_id)

    with pytest.raises(NotFound):
        service.change_status(alice, task.id, "completed")
    with pytest.raises(Forbidden):
        service.update_task(alice, task.id, UpdateTask.from_payload({"status": "completed"}))

    assert tasks.get(task.id).status == TaskStatus.ACTIVE
    assert tasks.get(task.id).completed_at is None


def test_reopening_clears_completed_at(service, clock, alice) -> None:
    task = _create(service, alice)
    service.change_status(alice, task.id, "completed")
    clock.advance(days=1)

    reopened = service.change_status(alice, task.id, "active")

    assert reopened.status == TaskStatus.ACTIVE
    assert reopened.completed_at is None


def test_same_status_is_a_noop(service, tasks, clock, alice) -> None:
    task = _create(service, alice)
    completed = service.change_status(alice, task.id, "completed")
    writes = tasks.writes
    clock.advance(hours=5)

    again = service.change_status(alice, task.id, "completed")

    assert again.completed_at == completed.completed_at
    assert again.updated_at == completed.updated_at
    assert tasks.writes == writes


def test_invalid_status_is_rejected(service, alice) -> None:
    task = _create(service, alice)
    with pytest.raises(InvalidStatus):
        service.change_status(alice, task.id, "in progress")


def test_status_through_partial_update_keeps_completed_at_in_sync(service, clock, alice) -> None:
    task = _create(service, alice)
    now = clock.advance(minutes=30)

    updated = service.update_task(alice, task.id, UpdateTask.from_payload({"status": "completed"}))
    assert updated.completed_at == now

    reopened = service.update_task(alice, task.id, UpdateTask.from_payload({"status": "active", "title": "Redo"}))
    assert reopened.completed_at is None
    assert reopened.title == "Redo"


def test_uninvolved_user_cannot_tell_task_exists(service, alice, dave) -> None:
    task = _create(service, alice)

    with pytest.raises(NotFound) as hidden:
        service.get_task(dave, task.id)
    with pytest.raises(NotFound) as missing:
        service.get_task(dave, 999)

    assert str(hidden.value) == str(missing.value)
    for attempt in (
        lambda: service.update_task(dave, task.id, UpdateTask.from_payload({"title": "Mine now"})),
        lambda: service.change_status(dave, task.id, "completed"),
        lambda: service.delete_task(dave, task.id),
    ):
        with pytest.raises(NotFound):
            attempt()


def test_assignee_cannot_edit_details(service, tasks, alice, bob) -> None:
    task = _create(service, alice, assignee_id=bob.user_id)

    with pytest.raises(Forbidden):
        service.update_task(bob, task.id, UpdateTask.from_payload({"title": "Renamed"}))

    assert tasks.get(task.id).title == "Write report"


def test_assignee_can_resubmit_unchanged_details(service, alice, bob) -> None:
    task = _create(service, alice, assignee_id=bob.user_id, priority="high")

    updated = service.update_task(
        bob, task.id, UpdateTask.from_payload({"title": "Write report", "priority": "high", "status": "completed"})
    )

    assert updated.status == TaskStatus.COMPLETED


def test_non_creator_cannot_reassign(service, tasks, alice, bob, dave) -> None:
    task = _create(service, alice, assignee_id=bob.user_id)

    with pytest.raises(Forbidden):
        service.update_task(bob, task.id, UpdateTask.from_payload({"assignee_id": dave.user_id}))

    assert tasks.get(task.id).assignee_id == bob.user_id


def test_reassign_to_inactive_user_leaves_task_unchanged(service, tasks, alice, bob) -> None:
    task = _create(service, alice, assignee_id=bob.user_id)

    with pytest.raises(InvalidAssignee):
        service.update_task(
            alice, task.id, UpdateTask.from_payload({"assignee_id": CAROL_ID, "title": "Handover"})
        )

    stored = tasks.get(task.id)
    assert stored.assignee_id == bob.user_id
    assert stored.title == "Write report"


def test_creator_reassigns(service, alice, bob, dave) -> None:
    task = _create(service, alice, assignee_id=bob.user_id)

    updated = service.update_task(alice, task.id, UpdateTask.from_payload({"assignee_id": dave.user_id}))

    assert updated.assignee_id == dave.user_id
    assert updated.assignee.first_name == "Dave"
    with pytest.raises(NotFound):
        service.get_task(bob, task.id)


def test_only_creator_deletes(service, tasks, alice, bob) -> None:
    task = _create(service, alice, assignee_id=bob.user_id)

    with pytest.raises(NotFound):
        service.delete_task(bob, task.id)
    assert task.id in tasks.tasks

    service.delete_task(alice, task.id)
    assert task.id not in tasks.tasks


def test_assigned_view_ignores_creator(service, alice, bob) -> None:
    own = _create(service, alice, title="Own")
    delegated = _create(service, bob, title="From Bob", assignee_id=alice.user_id)
    _create(service, alice, title="For Bob", assignee_id=bob.user_id)

    listed = service.list_tasks(alice, TaskFilters(view="assigned"))

    assert [t.id for t in listed] == [delegated.id, own.id]


def test_default_view_lists_involved_tasks_newest_first(service, clock, alice, bob, dave) -> None:
    first = _create(service, alice, title="First")
    clock.advance(minutes=1)
    second = _create(service, bob, title="Second", assignee_id=alice.user_id)
    clock.advance(minutes=1)
    _create(service, dave, title="Unrelated")

    listed = service.list_tasks(alice, TaskFilters())

    assert [t.id for t in listed] == [second.id, first.id]


def test_search_never_leaks_other_users_tasks(service, alice, dave) -> None:
    _create(service, dave, title="Budget", description="quarterly figures")
    mine = _create(service, alice, title="Figures", description="")

    listed = service.list_tasks(alice, TaskFilters(search="FIGURES"))

    assert [t.id for t in listed] == [mine.id]


def test_status_and_priority_filters(service, alice) -> None:
    high = _create(service, alice, title="Urgent", priority="high")
    low = _create(service, alice, title="Later", priority="low")
    service.change_status(alice, low.id, "completed")

    assert [t.id for t in service.list_tasks(alice, TaskFilters(priority="high"))] == [high.id]
    assert [t.id for t in service.list_tasks(alice, TaskFilters(status="completed"))] == [low.id]
    assert len(service.list_tasks(alice, TaskFilters(status="all", priority="all"))) == 2


def test_list_requires_identity(service) -> None:
    with pytest.raises(Unauthenticated):
        service.list_tasks(None, TaskFilters())


def test_task_counts(service, alice, bob) -> None:
    one = _create(service, alice, assignee_id=bob.user_id)
    _create(service, alice, assignee_id=bob.user_id, priority=TaskPriority.LOW.value)
    service.change_status(bob, one.id, "completed")

    assert service.task_counts(bob.user_id) == {"completed": 1, "active": 1}
