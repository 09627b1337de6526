"""Structured error responses for the HTTP boundary."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tasktrack.domain import errors

logger = logging.getLogger(__name__)

STATUS_CODES = {
    errors.Unauthenticated: status.HTTP_401_UNAUTHORIZED,
    errors.InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    errors.ValidationError: status.HTTP_400_BAD_REQUEST,
    errors.InvalidAssignee: status.HTTP_400_BAD_REQUEST,
    errors.InvalidStatus: status.HTTP_400_BAD_REQUEST,
    errors.NotFound: status.HTTP_404_NOT_FOUND,
    errors.Forbidden: status.HTTP_403_FORBIDDEN,
    errors.Conflict: status.HTTP_409_CONFLICT,
}


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"success": False, "error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


def status_code_for(exc: errors.TaskTrackError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_400_BAD_REQUEST


async def tasktrack_error_handler(_: Request, exc: errors.TaskTrackError) -> JSONResponse:
    code = status_code_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=code,
        content=build_error_payload(exc.code, exc.message, exc.details),
        headers=headers,
    )


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=build_error_payload(errors.ValidationError.code, "Validation failed", {"errors": fields}),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error_payload("internal_error", "Internal server error"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(errors.TaskTrackError, tasktrack_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
