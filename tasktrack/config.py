from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DEV_JWT_SECRET = "tasktrack-development-secret-change-me"


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    app_env: str = "development"
    log_level: str = "INFO"
    log_dir: str = "logs"
    access_token_ttl_minutes: int = 15
    refresh_token_ttl_days: int = 7
    api_host: str = "127.0.0.1"
    api_port: int = 8000


def _resolve_jwt_secret(app_env: str) -> str:
    secret = os.getenv("JWT_SECRET", "").strip()
    if secret:
        return secret
    if app_env != "development":
        raise RuntimeError("JWT_SECRET is not set. It is required outside development.")
    logger.warning("JWT_SECRET is not set, using the development secret")
    return DEV_JWT_SECRET


def load_settings() -> Settings:
    load_env()

    database_url = os.getenv("DATABASE_URL", "").strip()
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Create a .env file with your connection string.")

    app_env = os.getenv("APP_ENV", "development")
    return Settings(
        database_url=database_url,
        jwt_secret=_resolve_jwt_secret(app_env),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        access_token_ttl_minutes=int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "15")),
        refresh_token_ttl_days=int(os.getenv("REFRESH_TOKEN_TTL_DAYS", "7")),
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )


SETTINGS = load_settings()
