from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error payload returned by the chat API:
    {
        "error": "invalid_input",
        "message": "User ID is required",
        "code": 400,
        "details": {...}
    }
    """

    error: str = Field(..., description="Machine-readable error type")
    message: str = Field(..., description="Human-readable error message")
    code: int = Field(..., description="HTTP status code for this error")
    details: Optional[Dict[str, Any]] = Field(
        default=None, description="Optional structured error details"
    )


def error_payload(
    status_code: int,
    *,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return ErrorResponse(
        error=error,
        message=message,
        code=status_code,
        details=details,
    ).model_dump()


def http_error(
    status_code: int,
    *,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    """
    Helper to create an HTTPException with a standardised error body.
    """
    return HTTPException(
        status_code=status_code,
        detail=error_payload(status_code, error=error, message=message, details=details),
    )


def not_found(message: str, *, details: Optional[Dict[str, Any]] = None) -> HTTPException:
    return http_error(
        status.HTTP_404_NOT_FOUND, error="not_found", message=message, details=details
    )


def internal_error(message: str) -> HTTPException:
    # Never carries details: callers must not see internal causes.
    return http_error(
        status.HTTP_500_INTERNAL_SERVER_ERROR, error="internal_error", message=message
    )


__all__ = [
    "ErrorResponse",
    "error_payload",
    "http_error",
    "not_found",
    "internal_error",
]
