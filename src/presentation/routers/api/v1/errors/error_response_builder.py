"""Error response builder for RFC 9457 Problem Details.

Builds problem responses from application errors and from the middleware
rejections, which have a status code but no application error.

Exports:
    ErrorResponseBuilder: Utility class for building RFC 9457 responses
    HTTP_STATUS_INFO: Status code to (title, slug) mapping
"""

from collections.abc import Mapping

from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.application.errors import ApplicationError, ApplicationErrorCode
from src.core.config import settings
from src.presentation.routers.api.v1.errors.problem_details import ProblemDetails

# HTTP status code to (title, slug) mapping for RFC 9457 type URLs
HTTP_STATUS_INFO: dict[int, tuple[str, str]] = {
    400: ("Bad Request", "bad-request"),
    401: ("Authentication Required", "unauthorized"),
    403: ("Access Denied", "forbidden"),
    404: ("Resource Not Found", "not-found"),
    405: ("Method Not Allowed", "method-not-allowed"),
    409: ("Resource Conflict", "conflict"),
    422: ("Validation Failed", "validation-failed"),
    429: ("Too Many Requests", "rate-limit-exceeded"),
    500: ("Internal Server Error", "internal-server-error"),
    502: ("Bad Gateway", "bad-gateway"),
    503: ("Service Unavailable", "service-unavailable"),
}

_APPLICATION_STATUS: dict[ApplicationErrorCode, int] = {
    ApplicationErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ApplicationErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_502_BAD_GATEWAY,
}

_GENERIC_DETAIL: dict[int, str] = {
    status.HTTP_502_BAD_GATEWAY: "An upstream service rejected the request.",
    status.HTTP_503_SERVICE_UNAVAILABLE: "Service temporarily unavailable. Please try again later.",
}


def status_title(status_code: int) -> str:
    """Get human-readable title for HTTP status code."""
    return HTTP_STATUS_INFO.get(status_code, ("Error", "error"))[0]


def status_slug(status_code: int) -> str:
    """Get kebab-case error slug for RFC 9457 type URL."""
    return HTTP_STATUS_INFO.get(status_code, ("Error", "error"))[1]


class ErrorResponseBuilder:
    """Build RFC 9457 Problem Details error responses.

    Example:
        >>> response = ErrorResponseBuilder.from_status(
        ...     request=request,
        ...     status_code=403,
        ...     detail="Forbidden",
        ... )
    """

    @staticmethod
    def from_status(
        *,
        request: Request,
        status_code: int,
        detail: str,
        headers: Mapping[str, str] | None = None,
    ) -> JSONResponse:
        """Build a problem response for a bare status code.

        Args:
            request: Request being rejected (for ``instance`` and trace id).
            status_code: HTTP status.
            detail: Client-facing explanation (keep generic).
            headers: Extra response headers (e.g. Retry-After).

        Returns:
            JSONResponse with RFC 9457 ProblemDetails content.
        """
        problem = ProblemDetails(
            type=f"{settings.api_base_url}/errors/{status_slug(status_code)}",
            title=status_title(status_code),
            status=status_code,
            detail=detail,
            instance=str(request.url.path),
            trace_id=getattr(request.state, "trace_id", None),
        )
        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
            headers=dict(headers) if headers else None,
        )

    @staticmethod
    def from_application_error(
        error: ApplicationError,
        request: Request,
    ) -> JSONResponse:
        """Convert ApplicationError to RFC 9457 JSON response.

        The error message is internal; clients get the generic detail for the
        mapped status.
        """
        status_code = _APPLICATION_STATUS.get(
            error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return ErrorResponseBuilder.from_status(
            request=request,
            status_code=status_code,
            detail=_GENERIC_DETAIL.get(status_code, status_title(status_code)),
        )
