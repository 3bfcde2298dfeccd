"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://showersautodetail.com/problems"
PROBLEM_MEDIA_TYPE = "application/problem+json"


def _problem_type(slug: str) -> str:
    return f"{PROBLEM_BASE_URI}/{slug}"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    The rendered body is kept on ``problem_details``; extension members are
    merged into it at the top level.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.title = title
        self.message = detail

        self.problem_details: Dict[str, Any] = {
            "type": type_uri or f"about:blank#{status_code}",
            "title": title,
            "status": status_code,
        }
        if detail:
            self.problem_details["detail"] = detail
        self.problem_details.update(extensions or {})

        super().__init__(status_code=status_code, detail=self.problem_details, headers=headers)


class ValidationError(ProblemDetailsException):
    """Request is well formed but fails a business rule (400)."""

    def __init__(self, detail: str = "The request data failed validation"):
        super().__init__(400, "Validation Error", detail, _problem_type("validation-error"))


class AuthenticationError(ProblemDetailsException):
    """Missing, invalid or expired credentials (401)."""

    def __init__(self, detail: str = "Authentication credentials are required"):
        super().__init__(
            401,
            "Authentication Required",
            detail,
            _problem_type("authentication-required"),
            headers={"WWW-Authenticate": "Bearer"},
        )


class PaymentError(ProblemDetailsException):
    """The payment processor declined or rejected a charge (402)."""

    def __init__(self, detail: str = "Payment could not be processed", processor_errors: Optional[list] = None):
        extensions = {"processor_errors": processor_errors} if processor_errors else None
        super().__init__(402, "Payment Failed", detail, _problem_type("payment-failed"), extensions)


class NotFoundError(ProblemDetailsException):
    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            404,
            "Resource Not Found",
            detail or f"{resource_type.capitalize()} not found",
            _problem_type("resource-not-found"),
            extensions,
        )


class ConflictError(ProblemDetailsException):
    """The request conflicts with rows that still reference the resource (409)."""

    def __init__(self, detail: str = "The request conflicts with the current state of the resource"):
        super().__init__(409, "Conflict", detail, _problem_type("conflict"))


class RateLimitError(ProblemDetailsException):
    """A client exceeded one of the fixed-window request budgets (429)."""

    def __init__(
        self,
        detail: str = "Too many requests, please try again later",
        retry_after: Optional[int] = None,
        limit: Optional[int] = None,
        window: Optional[int] = None,
    ):
        extensions: Dict[str, Any] = {}
        headers = {}
        if limit:
            extensions["limit"] = limit
        if window:
            extensions["window_seconds"] = window
        if retry_after:
            extensions["retry_after_seconds"] = retry_after
            headers["Retry-After"] = str(retry_after)

        super().__init__(
            429,
            "Rate Limit Exceeded",
            detail,
            _problem_type("rate-limit-exceeded"),
            extensions,
            headers,
        )


class UpstreamServiceError(ProblemDetailsException):
    """A third-party API (Square, Google, ...) is unavailable or misconfigured."""

    def __init__(self, service: str, detail: Optional[str] = None, status_code: int = 502):
        super().__init__(
            status_code,
            "Upstream Service Error",
            detail or f"{service} is unavailable",
            _problem_type("upstream-service-error"),
            {"service": service},
        )


class InternalServerError(ProblemDetailsException):
    """500 carrying an ``error_id`` that matches the logged traceback."""

    def __init__(self, detail: str = "An unexpected error occurred while processing the request"):
        super().__init__(
            500,
            "Internal Server Error",
            detail,
            _problem_type("internal-server-error"),
            {"error_id": str(uuid.uuid4()), "timestamp": _timestamp()},
        )


def internal_error(log: logging.Logger, action: str, error: Exception, **context: Any) -> InternalServerError:
    """Log an unexpected error with its traceback and build the fixed 500 for ``action``."""
    exc = InternalServerError(detail=f"Failed to {action}")
    log.error(
        f"Unexpected error while trying to {action}",
        extra={**context, "error": str(error), "error_id": exc.problem_details["error_id"]},
        exc_info=True
    )
    return exc


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request schema errors as a 422 problem with one violation per field."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content={
            "type": _problem_type("request-validation-error"),
            "title": "Request Validation Error",
            "status": 422,
            "detail": "The request body or parameters are invalid",
            "violations": violations,
        },
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler: logs the traceback under a fresh error id and
    returns a 500 problem without leaking the exception text.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "type": _problem_type("internal-server-error"),
            "title": "Internal Server Error",
            "status": 500,
            "detail": "Internal server error",
            "instance": str(request.url),
            "error_id": error_id,
            "timestamp": _timestamp(),
        },
        media_type=PROBLEM_MEDIA_TYPE,
    )
