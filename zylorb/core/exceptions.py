"""Exceptions raised by the authentication core.

Every exception carries the HTTP status code and error type the web layer
uses when turning it into a JSON response.
"""

from typing import Optional


class ZylorbError(Exception):
    """Base exception for errors surfaced to API callers."""

    status_code: int = 500
    error_type: str = "server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountValidationError(ZylorbError):
    """Raised when registration or profile input is missing or malformed."""

    status_code = 400
    error_type = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DuplicateAccountError(ZylorbError):
    """Raised when a username or email is already registered."""

    status_code = 400
    error_type = "duplicate_account"

    def __init__(
        self,
        message: str = "User already exists with this email or username",
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.field = field


class InvalidCredentialsError(ZylorbError):
    """Raised for an unknown email or a wrong password (deliberately identical)."""

    status_code = 400
    error_type = "invalid_credentials"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class TokenError(ZylorbError):
    """Base exception for bearer tokens that fail validation.

    Subclasses tell the server why a token was rejected; callers only ever
    see the shared message.
    """

    status_code = 403
    error_type = "invalid_token"
    public_message = "Invalid or expired token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)


class MalformedTokenError(TokenError):
    """Raised when a token cannot be decoded or lacks required claims."""


class BadSignatureError(TokenError):
    """Raised when a token's signature does not match its payload."""


class ExpiredTokenError(TokenError):
    """Raised when a token is older than the token lifetime."""


class UnauthorizedError(ZylorbError):
    """Raised when a request has no token or its account no longer exists."""

    status_code = 401
    error_type = "unauthorized"


class RateLimitedError(ZylorbError):
    """Raised when a client exceeds its request ceiling."""

    status_code = 429
    error_type = "rate_limited"

    def __init__(
        self,
        message: str = "Too many requests from this address, please try again later.",
        retry_after: int = 0,
    ):
        super().__init__(message)
        self.retry_after = retry_after


class StoreUnavailableError(ZylorbError):
    """Raised when the account store cannot serve a request."""

    status_code = 502
    error_type = "store_unavailable"

    def __init__(self, message: str = "Account store is unavailable"):
        super().__init__(message)
