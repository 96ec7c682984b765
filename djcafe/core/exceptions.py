"""Application errors and the FastAPI handlers that render them.

Services raise the ``DjCafeError`` subclasses below; handlers turn them (and
request validation and integrity failures) into RFC 7807 problem responses.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from djcafe.core.logging import get_logger
from djcafe.core.problem_details import FieldError, ProblemDetailResponse, problem_response

logger = get_logger(__name__)

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class DjCafeError(Exception):
    """Base application error.

    Subclasses set ``code``, ``status_code`` and ``default_message``;
    ``details`` is logged and, for client errors, returned as ``context``.
    """

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def title(self) -> str:
        return self.code.replace("_", " ").title()


class NotFoundError(DjCafeError):
    """A product, table, order, video, campaign, quick ad or job does not exist."""

    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class ValidationError(DjCafeError):
    """Input failed a business rule that the request schema cannot express."""

    code = "VALIDATION_ERROR"
    status_code = 422
    default_message = "Validation failed"


class ConflictError(DjCafeError):
    """Operation conflicts with existing state.

    Raised for duplicate table numbers, cancelling a finished campaign, and
    playing a quick ad while a campaign occupies the TV.
    """

    code = "CONFLICT"
    status_code = 409
    default_message = "Resource conflict"


class BadRequestError(DjCafeError):
    code = "BAD_REQUEST"
    status_code = 400
    default_message = "Bad request"


class DatabaseError(DjCafeError):
    code = "DATABASE_ERROR"
    status_code = 500
    default_message = "Database operation failed"


async def djcafe_exception_handler(_request: Request, exc: DjCafeError) -> ProblemDetailResponse:
    """Render an application error; 5xx details stay in the log."""
    client_error = exc.status_code < 500
    log = logger.warning if client_error else logger.error
    log(
        "app.error_handled",
        error=exc.message,
        error_type=type(exc).__name__,
        error_code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
    )

    extensions = {"context": exc.details} if client_error and exc.details else {}
    return problem_response(
        status=exc.status_code,
        title=exc.title,
        detail=exc.message if client_error else "The operation could not be completed.",
        error_code=exc.code,
        **extensions,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> ProblemDetailResponse:
    """One ``errors`` entry per offending field, so the form can mark each input."""
    field_errors = [
        FieldError(
            field=".".join(str(part) for part in error.get("loc", ()) if part != "body")
            or "body",
            message=str(error.get("msg", "Validation failed")).removeprefix("Value error, "),
            type=str(error.get("type", "unknown")),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "app.validation_error",
        path=request.url.path,
        fields=[e.field for e in field_errors],
    )

    return problem_response(
        status=422,
        title="Validation Error",
        detail=field_errors[0].message if len(field_errors) == 1 else (
            f"Request validation failed with {len(field_errors)} errors."
        ),
        error_code="VALIDATION_ERROR",
        errors=field_errors,
    )


async def integrity_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> ProblemDetailResponse:
    """Constraint violations surface as 409 Conflict."""
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION:
        detail = "A record with the same value already exists."
    elif sqlstate == FOREIGN_KEY_VIOLATION:
        detail = "The change references a record that does not exist or is still in use."
    else:
        detail = "The change conflicts with existing data."

    logger.warning(
        "app.integrity_error",
        sqlstate=sqlstate,
        error=str(exc.orig),
        path=request.url.path,
    )
    return problem_response(status=409, title="Conflict", detail=detail, error_code="CONFLICT")


async def unhandled_exception_handler(request: Request, exc: Exception) -> ProblemDetailResponse:
    """Generic 500; the exception itself only goes to the log."""
    logger.error(
        "app.unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DjCafeError, djcafe_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
