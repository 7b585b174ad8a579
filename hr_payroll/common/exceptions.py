"""Payroll error types and their RFC 7807 problem+json rendering.

Every error raised by the services carries the month it concerns (when there
is one), and the handlers echo it as a ``month`` extension member so a client
can tell which payroll period failed without parsing ``detail``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://erp.local/errors"
PROBLEM_JSON = "application/problem+json"

logger = logging.getLogger(__name__)


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base payroll error, rendered as a problem detail."""

    status_code = 500
    error_type = "internal-error"
    title = "Internal Error"

    def __init__(
        self,
        detail: str,
        *,
        month: Optional[str] = None,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self.detail = detail
        self.month = month
        self.errors = errors
        super().__init__(detail)

    def to_problem(self, instance: str) -> dict[str, Any]:
        return _problem(
            self.status_code, self.error_type, self.title, self.detail, instance,
            month=self.month, errors=self.errors,
        )


class NotFoundException(AppException):
    """404 — a stored record the request depends on is missing."""

    status_code = 404
    error_type = "not-found"

    def __init__(self, entity_type: str, entity_id: Any, *, month: Optional[str] = None) -> None:
        self.title = f"{entity_type} Not Found"
        suffix = f" for {month}" if month else ""
        super().__init__(f"{entity_type} '{entity_id}' does not exist{suffix}.", month=month)


class SnapshotNotFoundException(NotFoundException):
    """404 — no compensation results were ever saved for the month."""

    error_type = "snapshot-not-found"

    def __init__(self, month: str) -> None:
        super().__init__("Compensation snapshot", month, month=month)


class ValidationException(AppException):
    """422 — request data the payroll rules cannot work with."""

    status_code = 422
    error_type = "validation-error"
    title = "Validation Error"

    def __init__(self, errors: dict[str, list[str]], *, month: Optional[str] = None) -> None:
        super().__init__("One or more fields failed validation.", month=month, errors=errors)


class InvalidMonthException(ValidationException):
    """422 — a payroll period that is not a YYYY-MM key with month 01-12."""

    error_type = "invalid-month"

    def __init__(self, value: Any) -> None:
        super().__init__(
            {"month_key": [f"'{value}' is not a valid month, expected YYYY-MM."]},
        )


# ── Problem builder ─────────────────────────────────────────────────

def _problem(
    status: int,
    error_type: str,
    title: str,
    detail: str,
    instance: str,
    *,
    month: Optional[str] = None,
    errors: Optional[dict[str, list[str]]] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    if month:
        body["month"] = month
    if errors:
        body["errors"] = errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_problem(str(request.url.path)),
        media_type=PROBLEM_JSON,
    )


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Drop the leading "body"/"path"/"query" segment: clients know where they sent it.
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ()) or ("unknown",)
        name = ".".join(str(p) for p in loc[1:]) or str(loc[0])
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content=_problem(
            422, "validation-error", "Validation Error", "Request validation failed.",
            str(request.url.path), errors=field_errors,
        ),
        media_type=PROBLEM_JSON,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the payroll problem+json handlers to the app."""
    app.add_exception_handler(AppException, _handle_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
