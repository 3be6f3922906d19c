"""Base schema: camelCase JSON on the wire, snake_case in Python."""

from typing import Any, Literal

from humps import camelize
from pydantic import BaseModel, ConfigDict


class CamelModel(BaseModel):
    """
    Base for every request and response body.

    Fields are declared in snake_case and travel as camelCase
    (``duration_minutes`` <-> ``durationMinutes``). Either spelling is
    accepted on input, and ORM rows can be validated directly.
    """

    model_config = ConfigDict(
        alias_generator=camelize,
        populate_by_name=True,
        from_attributes=True,
    )


ErrorCode = Literal[
    "API_ERROR",
    "NOT_FOUND",
    "VALIDATION_ERROR",
    "CONFLICT",
    "ACTION_PENDING",
    "WRONG_VIEW",
    "AUTH_FAILED",
    "RECORD_FETCH_FAILED",
    "RECORD_WRITE_FAILED",
    "SSO_UNAVAILABLE",
    "HTTP_ERROR",
    "DATABASE_ERROR",
    "INTERNAL_ERROR",
]


class ErrorDetail(CamelModel):
    code: ErrorCode
    message: str
    # e.g. {"field": "title"} for rejected edits, {"resource": "tasks"} for store failures
    details: dict[str, Any] = {}


class ErrorResponse(CamelModel):
    """Envelope returned for every failed request."""

    error: ErrorDetail
