"""Core domain models and exceptions for ZYLORB."""

from .exceptions import (
    AccountValidationError,
    BadSignatureError,
    DuplicateAccountError,
    ExpiredTokenError,
    InvalidCredentialsError,
    MalformedTokenError,
    RateLimitedError,
    StoreUnavailableError,
    TokenError,
    UnauthorizedError,
    ZylorbError,
)
from .models import DEFAULT_AVATAR, DEFAULT_ZONE, VALID_ZONES, Account, PublicAccount

__all__ = [
    "Account",
    "PublicAccount",
    "DEFAULT_AVATAR",
    "DEFAULT_ZONE",
    "VALID_ZONES",
    "ZylorbError",
    "AccountValidationError",
    "DuplicateAccountError",
    "InvalidCredentialsError",
    "TokenError",
    "MalformedTokenError",
    "BadSignatureError",
    "ExpiredTokenError",
    "UnauthorizedError",
    "RateLimitedError",
    "StoreUnavailableError",
]
