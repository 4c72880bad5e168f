"""Common response schemas shared by API routes."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response body."""

    message: str = Field(description="Human-readable error message")
    error_type: Optional[str] = Field(None, description="Machine-readable error kind")


class HealthCheckResponse(BaseModel):
    """Health check response."""

    message: str = Field(description="Status message")
    version: str = Field(description="API version")
    timestamp: str = Field(description="Server time (ISO 8601, UTC)")
    database: str = Field(description="Account store backend in use")


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Missing token or unknown account"},
    403: {"model": ErrorResponse, "description": "Invalid or expired token"},
    429: {"model": ErrorResponse, "description": "Too many requests"},
    502: {"model": ErrorResponse, "description": "Account store unavailable"},
}

# Responses shared by every route behind require_account
AUTH_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    code: ERROR_RESPONSES[code] for code in (401, 403, 429)
}
