"""Exception handlers — domain errors to HTTP responses.

Every error body has the same envelope:
    {"success": false, "message": ..., "error": {"code": ..., "details": ...}}
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from autoparc.domain.errors import (
    AutoParcError,
    ConflictError,
    NotFoundError,
    OperatorHasActiveAssignmentError,
    PreconditionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_SERVER_ERROR"

# Most specific classes first.
_STATUS_BY_ERROR: list[tuple[type[AutoParcError], int]] = [
    (OperatorHasActiveAssignmentError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PreconditionError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def status_for(exc: AutoParcError) -> int:
    for cls, code in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return code
    return status.HTTP_400_BAD_REQUEST


def _envelope(message: str, code: str, details: list | None = None) -> dict:
    return {
        "success": False,
        "message": message,
        "error": {"code": code, "details": details},
    }


async def domain_error_handler(request: Request, exc: AutoParcError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content=_envelope(exc.message, exc.code),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field = ".".join(str(part) for part in loc if part != "body") if loc else "unknown"
        details.append({"field": field, "message": error.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=422,
        content=_envelope("Validation error. Please check your input.", "VALIDATION_ERROR", details),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "An unexpected error occurred. Please try again later.", INTERNAL_ERROR_CODE
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AutoParcError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
