from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-for-the-tasktrack-suite-0123456789")

from dataclasses import replace  # noqa: E402
from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tasktrack.domain.entities import Requester, TaskEntity, UserEntity, UserRef  # noqa: E402
from tasktrack.domain.enums import TaskPriority, TaskStatus  # noqa: E402
from tasktrack.domain.query import TaskQuery  # noqa: E402
from tasktrack.infra.db import create_schema  # noqa: E402
from tasktrack.services.task_service import TaskService  # noqa: E402

START = datetime(2026, 3, 1, 9, 0, 0)


class Clock:
    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeUserRepo:
    def __init__(self) -> None:
        self.users: dict[int, UserEntity] = {}
        self._id = 1

    def add(self, first_name: str, email: str, is_active: bool = True, password_hash: str = "") -> UserEntity:
        return self.create({
            "first_name": first_name,
            "last_name": "Tester",
            "email": email,
            "is_active": is_active,
            "password_hash": password_hash,
        })

    def get(self, user_id: int) -> UserEntity | None:
        return self.users.get(user_id)

    def find_by_email(self, email: str) -> UserEntity | None:
        email = email.strip().lower()
        return next((u for u in self.users.values() if u.email.lower() == email), None)

    def create(self, data: dict) -> UserEntity:
        user = UserEntity(
            id=self._id,
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            is_active=data.get("is_active", True),
            created_at=START,
            updated_at=START,
            password_hash=data.get("password_hash", ""),
        )
        self.users[user.id] = user
        self._id += 1
        return user

    def update(self, user_id: int, data: dict) -> UserEntity | None:
        user = self.users.get(user_id)
        if not user:
            return None
        updated = replace(user, **data)
        self.users[user_id] = updated
        return updated

    def delete(self, user_id: int) -> bool:
        return self.users.pop(user_id, None) is not None

    def search_active(self, term: str | None = None, limit: int = 20) -> list[UserEntity]:
        users = [u for u in self.users.values() if u.is_active]
        if term:
            needle = term.lower()
            users = [
                u for u in users
                if needle in u.first_name.lower() or needle in u.last_name.lower() or needle in u.email.lower()
            ]
        return sorted(users, key=lambda u: (u.first_name, u.id))[:limit]


class FakeTaskRepo:
    def __init__(self, users: FakeUserRepo, clock: Clock) -> None:
        self.tasks: dict[int, TaskEntity] = {}
        self.writes = 0
        self._users = users
        self._clock = clock
        self._id = 1

    def _ref(self, user_id: int) -> UserRef | None:
        user = self._users.get(user_id)
        return UserRef.of(user) if user else None

    def find(self, query: TaskQuery) -> list[TaskEntity]:
        return query.order([t for t in self.tasks.values() if query.matches(t)])

    def get(self, task_id: int) -> TaskEntity | None:
        return self.tasks.get(task_id)

    def insert(self, data: dict) -> TaskEntity:
        now = self._clock()
        task = TaskEntity(
            id=self._id,
            title=data["title"],
            description=data.get("description", ""),
            status=TaskStatus(data.get("status", "active")),
            priority=TaskPriority(data.get("priority", "medium")),
            due_date=data.get("due_date"),
            tags=tuple(data.get("tags", ())),
            creator_id=data["creator_id"],
            assignee_id=data["assignee_id"],
            created_at=now,
            updated_at=now,
            completed_at=data.get("completed_at"),
            creator=self._ref(data["creator_id"]),
            assignee=self._ref(data["assignee_id"]),
        )
        self.tasks[task.id] = task
        self._id += 1
        self.writes += 1
        return task

    def update(self, task_id: int, data: dict) -> TaskEntity | None:
        task = self.tasks.get(task_id)
        if not task:
            return None
        patch = dict(data)
        if "tags" in patch:
            patch["tags"] = tuple(patch["tags"])
        if "assignee_id" in patch:
            patch["assignee"] = self._ref(patch["assignee_id"])
        updated = replace(task, updated_at=self._clock(), **patch)
        self.tasks[task_id] = updated
        self.writes += 1
        return updated

    def delete(self, task_id: int) -> bool:
        self.writes += 1
        return self.tasks.pop(task_id, None) is not None

    def count_for_assignee(self, user_id: int, status: TaskStatus) -> int:
        return sum(1 for t in self.tasks.values() if t.assignee_id == user_id and t.status == status)


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def users() -> FakeUserRepo:
    repo = FakeUserRepo()
    repo.add("Alice", "alice@example.com")
    repo.add("Bob", "bob@example.com")
    repo.add("Carol", "carol@example.com", is_active=False)
    repo.add("Dave", "dave@example.com")
    return repo


@pytest.fixture
def tasks(users: FakeUserRepo, clock: Clock) -> FakeTaskRepo:
    return FakeTaskRepo(users, clock)


@pytest.fixture
def service(tasks: FakeTaskRepo, users: FakeUserRepo, clock: Clock) -> TaskService:
    return TaskService(tasks, users, clock=clock)


@pytest.fixture
def alice() -> Requester:
    return Requester(user_id=1)


@pytest.fixture
def bob() -> Requester:
    return Requester(user_id=2)


@pytest.fixture
def dave() -> Requester:
    return Requester(user_id=4)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()
