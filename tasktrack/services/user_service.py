from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from tasktrack.domain.commands import ChangePassword, RegisterUser, UpdateProfile
from tasktrack.domain.entities import Requester, UserEntity
from tasktrack.domain.errors import Conflict, Forbidden, InvalidCredentials, NotFound, Unauthenticated
from tasktrack.infra.repository import UserRepository
from tasktrack.infra.security import hash_password, verify_password

from .task_service import TaskService

logger = logging.getLogger(__name__)

ASSIGNABLE_LIMIT = 20


@dataclass(frozen=True)
class UserProfile:
    user: UserEntity
    tasks_completed: int
    active_tasks: int


def _require_self(requester: Requester | None, user_id: int, action: str) -> int:
    if requester is None or not requester.is_active:
        raise Unauthenticated()
    if requester.user_id != user_id:
        raise Forbidden(f"You can only {action} your own account")
    return requester.user_id


class UserService:
    def __init__(self, users: UserRepository, tasks: TaskService) -> None:
        self._users = users
        self._tasks = tasks

    def register(self, command: RegisterUser) -> UserEntity:
        if self._users.find_by_email(command.email):
            raise Conflict("User with this email already exists")
        try:
            user = self._users.create({
                "first_name": command.first_name,
                "last_name": command.last_name,
                "email": command.email,
                "password_hash": hash_password(command.password),
            })
        except IntegrityError:
            raise Conflict("User with this email already exists") from None
        logger.info("Registered user %s", user.id)
        return user

    def get_user(self, user_id: int) -> UserEntity:
        user = self._users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def profile(self, requester: Requester, user_id: int) -> UserProfile:
        _require_self(requester, user_id, "view")
        user = self.get_user(user_id)
        counts = self._tasks.task_counts(user_id)
        return UserProfile(user=user, tasks_completed=counts["completed"], active_tasks=counts["active"])

    def update_profile(self, requester: Requester, user_id: int, command: UpdateProfile) -> UserEntity:
        _require_self(requester, user_id, "update")
        changes = dict(command.changes)
        email = changes.get("email")
        if email:
            existing = self._users.find_by_email(email)
            if existing is not None and existing.id != user_id:
                raise Conflict("User with this email already exists")
        if not changes:
            return self.get_user(user_id)
        try:
            user = self._users.update(user_id, changes)
        except IntegrityError:
            raise Conflict("User with this email already exists") from None
        if user is None:
            raise NotFound("User not found")
        logger.info("User %s updated profile fields: %s", user_id, ", ".join(sorted(changes)))
        return user

    def change_password(self, requester: Requester, command: ChangePassword) -> None:
        if requester is None or not requester.is_active:
            raise Unauthenticated()
        user = self.get_user(requester.user_id)
        if not verify_password(command.current_password, user.password_hash):
            raise InvalidCredentials("Incorrect current password")
        self._users.update(user.id, {"password_hash": hash_password(command.new_password)})
        logger.info("User %s changed password", user.id)

    def deactivate(self, requester: Requester, user_id: int) -> UserEntity:
        _require_self(requester, user_id, "deactivate")
        user = self._users.update(user_id, {"is_active": False})
        if user is None:
            raise NotFound("User not found")
        logger.info("User %s deactivated", user_id)
        return user

    def delete_user(self, requester: Requester, user_id: int) -> None:
        _require_self(requester, user_id, "delete")
        if not self._users.delete(user_id):
            raise NotFound("User not found")
        logger.info("User %s deleted", user_id)

    def list_assignable(self, search: str | None = None) -> list[UserEntity]:
        term = (search or "").strip() or None
        return self._users.search_active(term, limit=ASSIGNABLE_LIMIT)
