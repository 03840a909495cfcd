# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class PdxDiyException(Exception):
    """
    Base exception for the PDX-DIY API.

    All HTTP-facing exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PDX_DIY_ERROR",
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
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Event Exceptions
# =============================================================================

class EventNotFoundError(PdxDiyException):
    """Raised when an event ID doesn't exist."""

    def __init__(self, event_id: str):
        super().__init__(
            message=f"Event not found: {event_id}",
            code="EVENT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the event_id is correct",
            details={"event_id": event_id}
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class InvalidMagicLinkError(PdxDiyException):
    """Raised when a magic-link token is unknown, expired or already used."""

    def __init__(self, email: str):
        super().__init__(
            message="Sign-in link is invalid or has expired",
            code="INVALID_MAGIC_LINK",
            status_code=400,
            suggestion="Request a new sign-in link",
            details={"email": email}
        )


class EmailDeliveryError(PdxDiyException):
    """Raised when the email provider rejects or fails a send."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to send sign-in email: {error}",
            code="EMAIL_DELIVERY_FAILED",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def pdx_diy_exception_handler(
    request: Request,
    exc: PdxDiyException
) -> JSONResponse:
    """
    Convert PdxDiyException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
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
    Handle request validation errors.

    Converts pydantic errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": [
                {
                    "field": ".".join(str(part) for part in error["loc"]),
                    "message": error["msg"].removeprefix("Value error, "),
                }
                for error in exc.errors()
            ],
        }
    )
