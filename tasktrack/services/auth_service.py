from __future__ import annotations

import logging
from dataclasses import dataclass

from tasktrack.domain.commands import normalize_email
from tasktrack.domain.entities import Requester, UserEntity
from tasktrack.domain.errors import InvalidCredentials, Unauthenticated, ValidationError
from tasktrack.infra.repository import UserRepository
from tasktrack.infra.security import ACCESS, REFRESH, TokenCodec, TokenPair, verify_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: UserEntity
    tokens: TokenPair


class AuthService:
    def __init__(self, users: UserRepository, codec: TokenCodec) -> None:
        self._users = users
        self._codec = codec

    def login(self, email: str, password: str) -> LoginResult:
        try:
            email = normalize_email(email)
        except ValidationError:
            raise InvalidCredentials() from None
        user = self._users.find_by_email(email)
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("Failed login attempt for %s", email)
            raise InvalidCredentials()
        if not user.is_active:
            raise Unauthenticated("Account is deactivated")
        logger.info("User %s logged in", user.id)
        return LoginResult(user=user, tokens=self._codec.issue_pair(user.id))

    def refresh(self, refresh_token: str | None) -> LoginResult:
        if not refresh_token:
            raise Unauthenticated("Refresh token not provided")
        user = self._active_user(self._codec.decode(refresh_token, REFRESH))
        return LoginResult(user=user, tokens=self._codec.issue_pair(user.id))

    def resolve(self, access_token: str | None) -> Requester:
        """Turn a bearer token into the requester identity passed to the services."""
        if not access_token:
            raise Unauthenticated("Access token required")
        user = self._active_user(self._codec.decode(access_token, ACCESS))
        return Requester(user_id=user.id, is_active=user.is_active)

    def _active_user(self, user_id: int) -> UserEntity:
        user = self._users.get(user_id)
        if user is None or not user.is_active:
            raise Unauthenticated("User not found")
        return user
