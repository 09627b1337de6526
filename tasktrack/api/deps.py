from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tasktrack.domain.entities import Requester
from tasktrack.infra.repository import TaskRepository, UserRepository
from tasktrack.infra.security import TokenCodec
from tasktrack.services.auth_service import AuthService
from tasktrack.services.task_service import TaskService
from tasktrack.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_task_repository() -> TaskRepository:
    return TaskRepository()


def get_user_repository() -> UserRepository:
    return UserRepository()


def get_token_codec() -> TokenCodec:
    return TokenCodec()


def get_task_service(
    tasks: TaskRepository = Depends(get_task_repository),
    users: UserRepository = Depends(get_user_repository),
) -> TaskService:
    return TaskService(tasks, users)


def get_user_service(
    users: UserRepository = Depends(get_user_repository),
    tasks: TaskService = Depends(get_task_service),
) -> UserService:
    return UserService(users, tasks)


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    codec: TokenCodec = Depends(get_token_codec),
) -> AuthService:
    return AuthService(users, codec)


def get_requester(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Requester:
    """Resolve the bearer token; every task and user route depends on this."""
    return auth.resolve(credentials.credentials if credentials else None)
