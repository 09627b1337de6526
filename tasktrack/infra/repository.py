from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, func, or_, select, update

from tasktrack.domain.entities import TaskEntity, UserEntity, UserRef
from tasktrack.domain.enums import TaskPriority, TaskStatus, TaskView
from tasktrack.domain.query import TaskQuery, fold_text

from .db import SessionLocal
from .models import TaskModel, UserModel, utcnow


def _to_user(model: UserModel) -> UserEntity:
    return UserEntity(
        id=model.id,
        first_name=model.first_name,
        last_name=model.last_name,
        email=model.email,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
        password_hash=model.password_hash,
    )


def _to_ref(model: UserModel | None) -> UserRef | None:
    if model is None:
        return None
    return UserRef(id=model.id, first_name=model.first_name, last_name=model.last_name, email=model.email)


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        title=model.title,
        description=model.description or "",
        status=TaskStatus(model.status),
        priority=TaskPriority(model.priority),
        due_date=model.due_date,
        tags=tuple(model.tags or ()),
        creator_id=model.creator_id,
        assignee_id=model.assignee_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
        completed_at=model.completed_at,
        creator=_to_ref(model.creator),
        assignee=_to_ref(model.assignee),
    )


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _apply_query(stmt, query: TaskQuery) -> object:
    if query.view is TaskView.ASSIGNED:
        stmt = stmt.where(TaskModel.assignee_id == query.requester_id)
    elif query.view is TaskView.CREATED:
        stmt = stmt.where(TaskModel.creator_id == query.requester_id)
    else:
        stmt = stmt.where(
            or_(
                TaskModel.creator_id == query.requester_id,
                TaskModel.assignee_id == query.requester_id,
            )
        )

    if query.status is not None:
        stmt = stmt.where(TaskModel.status == query.status.value)

    if query.priority is not None:
        stmt = stmt.where(TaskModel.priority == query.priority.value)

    if query.search:
        pattern = _like_pattern(fold_text(query.search))
        stmt = stmt.where(
            or_(
                TaskModel.title_folded.like(pattern, escape="\\"),
                TaskModel.description_folded.like(pattern, escape="\\"),
            )
        )

    return stmt


def _column_values(data: dict) -> dict:
    values = {}
    for key, value in data.items():
        if key in ("status", "priority") and value is not None:
            value = str(value)
        elif key == "tags":
            value = list(value or ())
        values[key] = value
        if key in ("title", "description"):
            values[f"{key}_folded"] = fold_text(value)
    return values


class TaskRepository:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def find(self, query: TaskQuery) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = _apply_query(select(TaskModel), query)
            stmt = stmt.order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
            return [_to_entity(task) for task in session.scalars(stmt).unique()]

    def get(self, task_id: int) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            return _to_entity(task) if task else None

    def insert(self, data: dict) -> TaskEntity:
        with self._session_factory() as session:
            task = TaskModel(**_column_values(data))
            session.add(task)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def update(self, task_id: int, data: dict) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None

            for key, value in _column_values(data).items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def delete(self, task_id: int) -> bool:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return False
            session.delete(task)
            session.commit()
            return True

    def count_for_assignee(self, user_id: int, status: TaskStatus) -> int:
        with self._session_factory() as session:
            return session.scalar(
                select(func.count())
                .select_from(TaskModel)
                .where(TaskModel.assignee_id == user_id, TaskModel.status == status.value)
            ) or 0


class UserRepository:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, user_id: int) -> Optional[UserEntity]:
        with self._session_factory() as session:
            user = session.get(UserModel, user_id)
            return _to_user(user) if user else None

    def find_by_email(self, email: str) -> Optional[UserEntity]:
        with self._session_factory() as session:
            user = session.scalar(
                select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
            )
            return _to_user(user) if user else None

    def create(self, data: dict) -> UserEntity:
        with self._session_factory() as session:
            user = UserModel(**data)
            session.add(user)
            session.commit()
            session.refresh(user)
            return _to_user(user)

    def update(self, user_id: int, data: dict) -> Optional[UserEntity]:
        with self._session_factory() as session:
            user = session.get(UserModel, user_id)
            if not user:
                return None
            for key, value in data.items():
                setattr(user, key, value)
            session.commit()
            session.refresh(user)
            return _to_user(user)

    def delete(self, user_id: int) -> bool:
        """Remove a user, their created tasks, and hand back tasks assigned to them."""
        with self._session_factory() as session:
            user = session.get(UserModel, user_id)
            if not user:
                return False
            session.execute(
                delete(TaskModel)
                .where(TaskModel.creator_id == user_id)
                .execution_options(synchronize_session=False)
            )
            session.execute(
                update(TaskModel)
                .where(TaskModel.assignee_id == user_id)
                .values(assignee_id=TaskModel.creator_id, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            session.delete(user)
            session.commit()
            return True

    def search_active(self, term: str | None = None, limit: int = 20) -> list[UserEntity]:
        with self._session_factory() as session:
            stmt = select(UserModel).where(UserModel.is_active.is_(True))
            if term:
                pattern = _like_pattern(term)
                stmt = stmt.where(
                    or_(
                        UserModel.first_name.ilike(pattern, escape="\\"),
                        UserModel.last_name.ilike(pattern, escape="\\"),
                        UserModel.email.ilike(pattern, escape="\\"),
                    )
                )
            stmt = stmt.order_by(UserModel.first_name.asc(), UserModel.id.asc()).limit(limit)
            return [_to_user(user) for user in session.scalars(stmt)]
