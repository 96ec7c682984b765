"""RFC 7807 Problem Details for HTTP APIs.

Every error leaving the API uses this shape so the admin UI can show one toast
per failure without parsing ad-hoc payloads.

Reference: https://datatracker.ietf.org/doc/html/rfc7807
"""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from djcafe.core.logging import request_id_ctx

ERROR_TYPE_BASE = "/errors"

ERROR_TYPES = {
    "NOT_FOUND": f"{ERROR_TYPE_BASE}/not-found",
    "VALIDATION_ERROR": f"{ERROR_TYPE_BASE}/validation",
    "DATABASE_ERROR": f"{ERROR_TYPE_BASE}/database",
    "CONFLICT": f"{ERROR_TYPE_BASE}/conflict",
    "INTERNAL_ERROR": f"{ERROR_TYPE_BASE}/internal",
    "BAD_REQUEST": f"{ERROR_TYPE_BASE}/bad-request",
}


def error_type_uri(code: str) -> str:
    """Problem type URI for an error code (``SOME_CODE`` -> ``/errors/some-code``)."""
    return ERROR_TYPES.get(code, f"{ERROR_TYPE_BASE}/{code.lower().replace('_', '-')}")


class FieldError(BaseModel):
    """One offending request field."""

    field: str
    message: str
    type: str


class ProblemDetail(BaseModel):
    """RFC 7807 problem document.

    ``detail`` is the text the admin UI shows in its error toast. Extra
    members (``context`` for business errors) are allowed by the RFC.
    """

    model_config = ConfigDict(extra="allow")

    type: str = "about:blank"
    title: str
    status: int = Field(..., ge=400, le=599)
    detail: str | None = None
    instance: str | None = None
    code: str | None = None
    errors: list[FieldError] | None = None
    request_id: str | None = None


class ProblemDetailResponse(JSONResponse):
    media_type = "application/problem+json"


def problem_response(
    status: int,
    title: str,
    detail: str | None = None,
    error_code: str = "INTERNAL_ERROR",
    errors: list[FieldError] | None = None,
    **extensions: Any,
) -> ProblemDetailResponse:
    """Build a problem response tagged with the current request ID.

    Args:
        status: HTTP status code.
        title: Short summary of the problem type.
        detail: Explanation of this occurrence.
        error_code: Machine-readable code; also selects the type URI.
        errors: Field-level validation errors.
        **extensions: Additional problem members.
    """
    request_id = request_id_ctx.get()
    problem = ProblemDetail(
        type=error_type_uri(error_code),
        title=title,
        status=status,
        detail=detail,
        instance=f"/requests/{request_id}" if request_id else None,
        code=error_code,
        errors=errors,
        request_id=request_id,
        **extensions,
    )
    return ProblemDetailResponse(
        status_code=status,
        content=problem.model_dump(mode="json", exclude_none=True),
    )
