# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Every error body carries an `error` message and a machine-readable `code`.
# Configuration and validation errors are resolved at the boundary; provider
# failures are collapsed to a fixed code so internal details never leak.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MembershipException(Exception):
    """
    Base exception for the membership API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "MEMBERSHIP_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        # Details are merged at the top level ("missing", "details", ...)
        result.update(self.details)
        return result


# =============================================================================
# Boundary Exceptions
# =============================================================================

class ConfigurationError(MembershipException):
    """Raised when a required environment value is absent."""

    def __init__(self, missing: list[str], code: str = "MISSING_ENV"):
        super().__init__(
            message=f"Missing required configuration: {', '.join(missing)}",
            code=code,
            status_code=500,
            suggestion="Set the listed environment variables and redeploy",
            details={"missing": missing},
        )


class InvalidJSONError(MembershipException):
    """Raised when the request body is not valid JSON."""

    def __init__(self, error: str | None = None):
        super().__init__(
            message="Request body must be valid JSON",
            code="INVALID_JSON",
            status_code=400,
            suggestion="Send a JSON object with Content-Type: application/json",
            details={"reason": error} if error else None,
        )


class RequestValidationFailed(MembershipException):
    """Raised when one or more request fields are invalid."""

    def __init__(self, violations: list[dict[str, str]]):
        fields = []
        for violation in violations:
            if violation["field"] not in fields:
                fields.append(violation["field"])
        super().__init__(
            message="Validation failed",
            code="VALIDATION_ERROR",
            status_code=400,
            details={"details": fields, "violations": violations},
        )


class UpstreamError(MembershipException):
    """Raised when the database or payment provider call fails."""

    def __init__(self, code: str, message: str = "Upstream service request failed"):
        super().__init__(
            message=message,
            code=code,
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
        )


class RecordNotFoundError(MembershipException):
    """Raised when a record id doesn't exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(
            message=f"{kind} not found: {record_id}",
            code=f"{kind.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {kind.lower()} id is correct",
            details={"id": record_id},
        )


class CooldownActiveError(MembershipException):
    """Raised when a login link is re-requested before the cooldown elapses."""

    def __init__(self, seconds_remaining: int):
        super().__init__(
            message=f"Please wait {seconds_remaining}s before requesting another link.",
            code="COOLDOWN_ACTIVE",
            status_code=429,
            details={"seconds_remaining": seconds_remaining},
        )


class LoginFailedError(MembershipException):
    """Raised when a passwordless login link could not be sent."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="LOGIN_FAILED",
            status_code=400,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

def _field_name(location: tuple | list) -> str:
    """Drop the 'body'/'query' prefix from a pydantic error location."""
    parts = [str(part) for part in location if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


async def membership_exception_handler(
    request: Request,
    exc: MembershipException
) -> JSONResponse:
    """
    Convert MembershipException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - any additional context keys (missing, details, violations)
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Malformed JSON becomes INVALID_JSON; everything else is itemized as
    400 VALIDATION_ERROR with the offending field names.
    """
    errors = exc.errors()
    for error in errors:
        if error.get("type") == "json_invalid":
            return await membership_exception_handler(request, InvalidJSONError(error.get("msg")))

    violations = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in errors
    ]
    logger.info(f"Request validation failed on {request.url.path}: {[v['field'] for v in violations]}")
    return await membership_exception_handler(request, RequestValidationFailed(violations))


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (404, 405, 401, ...) in the shared shape."""
    code = {
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
    }.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "code": code},
        headers=getattr(exc, "headers", None),
    )
