"""Response schemas for the ZYLORB API."""

from .common import AUTH_ERROR_RESPONSES, ERROR_RESPONSES, ErrorResponse, HealthCheckResponse

__all__ = [
    "AUTH_ERROR_RESPONSES",
    "ERROR_RESPONSES",
    "ErrorResponse",
    "HealthCheckResponse",
]
