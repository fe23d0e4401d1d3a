"""RFC 9457 Problem Details for HTTP APIs.

Every rejection the defense layer produces (rate limit, CSRF, login failure,
admin key) uses this body. Detail strings stay generic: they never reveal
whether an identifier exists, whether a lock or a limit applied, or any
counter values.

Exports:
    ErrorDetail: Individual field-specific error
    ProblemDetails: RFC 9457 compliant error response schema
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Individual field-specific error (request validation only)."""

    field: str = Field(..., description="Field name")
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class ProblemDetails(BaseModel):
    """RFC 9457 Problem Details for HTTP APIs.

    Attributes:
        type: URI reference identifying the problem type
        title: Short, human-readable summary of the problem type
        status: HTTP status code for this occurrence
        detail: Human-readable explanation specific to this occurrence
        instance: URI reference identifying the specific occurrence
        errors: Optional list of field-specific errors (for validation failures)
        trace_id: Optional request trace ID for debugging

    Examples:
        >>> problem = ProblemDetails(
        ...     type="http://localhost:8000/errors/rate-limit-exceeded",
        ...     title="Too Many Requests",
        ...     status=429,
        ...     detail="Too many attempts. Please try again later.",
        ...     instance="/api/v1/sessions",
        ... )
    """

    type: str = Field(
        ...,
        description="URI reference identifying the problem type",
        examples=["http://localhost:8000/errors/rate-limit-exceeded"],
    )
    title: str = Field(
        ...,
        description="Short, human-readable summary",
        examples=["Too Many Requests"],
    )
    status: int = Field(
        ...,
        description="HTTP status code",
        examples=[429],
    )
    detail: str = Field(
        ...,
        description="Human-readable explanation",
        examples=["Too many attempts. Please try again later."],
    )
    instance: str = Field(
        ...,
        description="URI reference identifying this occurrence",
        examples=["/api/v1/sessions"],
    )
    errors: list[ErrorDetail] | None = Field(
        None,
        description="List of field-specific errors",
    )
    trace_id: str | None = Field(
        None,
        description="Request trace ID for debugging",
    )
