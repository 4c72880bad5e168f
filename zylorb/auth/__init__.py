"""Authentication module for ZYLORB."""

from .gateway import AuthGateway, AuthResult
from .schemas import (
    AccountResponse,
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenClaims,
)
from .security import (
    DEFAULT_HASH_ROUNDS,
    TOKEN_TTL,
    TokenCodec,
    hash_password,
    verify_password,
)
from .throttle import RateWindow, RequestThrottle

__all__ = [
    # Security functions
    "hash_password",
    "verify_password",
    "TokenCodec",
    "TOKEN_TTL",
    "DEFAULT_HASH_ROUNDS",
    # Gateway
    "AuthGateway",
    "AuthResult",
    # Schemas
    "TokenClaims",
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdateRequest",
    "AuthResponse",
    "AccountResponse",
    # Throttle
    "RequestThrottle",
    "RateWindow",
]
