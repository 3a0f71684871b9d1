"""Domain errors and the JSON error envelope.

Services raise AppError subclasses; the handlers below turn them (and
FastAPI/Starlette errors) into a single response shape:

    {"error": {"statusCode", "message", "code", "timestamp", "path", "details"?}}

Validation errors are reported as 400, not FastAPI's default 422.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: list[Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(AppError):
    """Entity absent, or present but invisible to the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class InvalidRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class SearchError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "SEARCH_ERROR"


_HTTP_CODES: dict[int, str] = {
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMITED",
}


def error_body(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    details: list[Any] | None = None,
) -> dict[str, Any]:
    """Build the error envelope shared by every handler."""
    body: dict[str, Any] = {
        "statusCode": status_code,
        "message": message,
        "code": code,
        "timestamp": datetime.now(UTC).isoformat(),
        "path": request.url.path,
    }
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return {"error": body}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        error_body(request, exc.status_code, exc.message, exc.code, exc.details),
        status_code=exc.status_code,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        error_body(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Invalid parameters",
            "VALIDATION_ERROR",
            details=list(exc.errors()),
        ),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Auth and rate-limit dependencies pass a dict detail carrying their own code
    if isinstance(exc.detail, dict):
        message = str(exc.detail.get("message", ""))
        code = str(exc.detail.get("code", _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")))
    else:
        message = str(exc.detail)
        code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        error_body(request, exc.status_code, message, code),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        error_body(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            "INTERNAL_ERROR",
        ),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach every handler to the application."""
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
