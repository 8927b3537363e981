"""
Structured exceptions and error responses for Lanes.

Provides consistent error handling across the API with:
- Custom exception classes
- Structured error response format
- FastAPI exception handlers
"""

from typing import Any, Dict, Optional, List
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from lanes.logging_config import get_logger

logger = get_logger("lanes.error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None  # Location of error (e.g., ["body", "title"])
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "forbidden")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class LanesException(Exception):
    """Base exception for all Lanes errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(LanesException):
    """Malformed or out-of-range payload."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class AuthenticationError(LanesException):
    """Missing or invalid identity claim."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="authentication_required",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ForbiddenError(LanesException):
    """Caller is known but may not perform this action."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            message=message,
            error_code="forbidden",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class InsufficientRoleError(ForbiddenError):
    """Caller's project role is below the floor required by the route."""

    def __init__(self, required_role: str):
        super().__init__(f"{required_role} role required")
        self.required_role = required_role


class NotFoundError(LanesException):
    """
    Resource not found.

    Also used when the caller has no membership in the owning project, so
    outsiders cannot tell a hidden project from a missing one.
    """

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        super().__init__(
            message=f"{resource} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(LanesException):
    """Request conflicts with the current state of a resource."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="conflict",
            status_code=status.HTTP_409_CONFLICT,
        )


class AlreadyMemberError(ConflictError):
    def __init__(self):
        super().__init__("User is already a member")


class DuplicateInvitationError(ConflictError):
    def __init__(self):
        super().__init__("Invitation already pending")


class InvitationProcessedError(ConflictError):
    def __init__(self):
        super().__init__("Invitation already processed")


class OwnerRoleChangeError(ValidationError):
    """The project owner's role is fixed at ADMIN."""

    def __init__(self):
        super().__init__("Project owner role cannot be changed")


class SelfInvitationError(ValidationError):
    def __init__(self):
        super().__init__("Cannot invite yourself")


# =============================================================================
# Exception Handlers
# =============================================================================

async def lanes_exception_handler(request: Request, exc: LanesException) -> JSONResponse:
    """Handle LanesException and return structured response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Re-shape FastAPI's validation errors into the structured format.

    The message names the first offending field.
    """
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        details.append({"loc": loc, "msg": error.get("msg", ""), "type": error.get("type", "")})

    message = "Invalid request"
    if details:
        first = details[0]
        field = first["loc"][-1] if len(first["loc"]) > 1 else None
        message = f"{field}: {first['msg']}" if field else first["msg"]

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "message": message,
            "details": details,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": None,
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(LanesException, lanes_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
