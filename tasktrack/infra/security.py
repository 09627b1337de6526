"""Password hashing and JWT access/refresh tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from tasktrack.config import SETTINGS
from tasktrack.domain.errors import Unauthenticated

JWT_ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    password_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenCodec:
    def __init__(
        self,
        secret: str = SETTINGS.jwt_secret,
        access_ttl: timedelta = timedelta(minutes=SETTINGS.access_token_ttl_minutes),
        refresh_ttl: timedelta = timedelta(days=SETTINGS.refresh_token_ttl_days),
    ) -> None:
        self._secret = secret
        self._ttl = {ACCESS: access_ttl, REFRESH: refresh_ttl}

    def issue(self, user_id: int, token_type: str = ACCESS) -> str:
        issued_at = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": token_type,
            "iat": issued_at,
            "exp": issued_at + self._ttl[token_type],
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def issue_pair(self, user_id: int) -> TokenPair:
        return TokenPair(
            access_token=self.issue(user_id, ACCESS),
            refresh_token=self.issue(user_id, REFRESH),
        )

    def decode(self, token: str, token_type: str = ACCESS) -> int:
        """Return the user id carried by ``token`` or raise ``Unauthenticated``."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token expired") from None
        except jwt.InvalidTokenError:
            raise Unauthenticated("Invalid token") from None

        if payload.get("type") != token_type:
            raise Unauthenticated("Invalid token type")
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise Unauthenticated("Invalid token subject") from None
