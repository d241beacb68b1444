"""Application errors and their RFC 7807 problem+json rendering.

Every error the API returns has the same body shape::

    {"type", "title", "status", "detail", "instance", "errors"?}

``AppException`` subclasses cover the domain failures. Framework errors
(401 from the auth dependencies, unknown routes, slowapi's 429 and request
validation) are rendered in the same shape so the client only has to read
``detail``.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

BASE_ERROR_URI = "https://competency-hub.local/errors"
PROBLEM_JSON = "application/problem+json"

logger = logging.getLogger(__name__)

# Problem types for framework errors, keyed by status code.
_HTTP_ERROR_TYPES: dict[int, str] = {
    401: "unauthorized",
    403: "forbidden",
    404: "not-found",
    405: "method-not-allowed",
    429: "rate-limited",
}


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for domain failures raised by the services."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    """404: no department, role, competency or employee under that key."""

    def __init__(self, entity_type: str, key: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} '{key}' does not exist.",
        )


class ConflictError(AppException):
    """409: a code, number, username or email is already taken."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class InUseError(AppException):
    """409: the entity is still referenced and cannot be deleted."""

    def __init__(self, entity_type: str, key: Any, referenced_by: str) -> None:
        super().__init__(
            status_code=409,
            error_type="in-use",
            title=f"{entity_type} In Use",
            detail=f"{entity_type} '{key}' is still referenced by {referenced_by}.",
        )


class ForbiddenException(AppException):
    """403: role, permission or department scope check failed."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class ValidationException(AppException):
    """422: input that is well-formed but breaks a business rule."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


# ── Problem body ────────────────────────────────────────────────────

def problem_response(
    request: Request,
    status_code: int,
    error_type: str,
    detail: Any,
    *,
    title: Optional[str] = None,
    errors: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{error_type}",
        "title": title or HTTPStatus(status_code).phrase,
        "status": status_code,
        "detail": detail,
        "instance": str(request.url.path),
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers=headers,
        media_type=PROBLEM_JSON,
    )


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group pydantic errors by dotted field path, dropping the body/query prefix."""
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        if len(loc) > 1:
            name = ".".join(str(p) for p in loc[1:])
        else:
            name = str(loc[0]) if loc else "unknown"
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))
    return field_errors


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    logger.info(
        "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.error_type,
    )
    return problem_response(
        request,
        exc.status_code,
        exc.error_type,
        exc.detail,
        title=exc.title,
        errors=exc.errors,
    )


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_type = _HTTP_ERROR_TYPES.get(exc.status_code, "http-error")
    if exc.status_code == 401:
        logger.info("%s %s -> 401 %s", request.method, request.url.path, exc.detail)
    return problem_response(
        request,
        exc.status_code,
        error_type,
        exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def _handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("%s %s -> 429 (limit %s)", request.method, request.url.path, exc.detail)
    return problem_response(
        request,
        429,
        "rate-limited",
        f"Too many requests: limit is {exc.detail}.",
    )


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return problem_response(
        request,
        422,
        "validation-error",
        "Request validation failed.",
        title="Validation Error",
        errors=_field_errors(exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the problem+json handlers; called from ``create_app``."""
    app.add_exception_handler(AppException, _handle_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _handle_rate_limit)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
