"""Route modules for the ZYLORB API."""

from . import accounts, auth

__all__ = [
    "accounts",
    "auth",
]
