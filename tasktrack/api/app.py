from __future__ import annotations

from fastapi import APIRouter, FastAPI

from tasktrack.api.errors import register_error_handlers
from tasktrack.api.routes import auth, tasks, users
from tasktrack.api.schemas import envelope

API_PREFIX = "/api/v1"
API_VERSION = "1.0.0"

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
def health():
    return envelope(message="API is healthy", version=API_VERSION)


def create_app() -> FastAPI:
    app = FastAPI(title="tasktrack", version=API_VERSION)
    register_error_handlers(app)
    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(tasks.router, prefix=API_PREFIX)
    app.include_router(users.router, prefix=API_PREFIX)
    return app
