"""FastAPI web API for ZYLORB authentication."""

from .main import create_app
from .settings import APISettings

__all__ = [
    "create_app",
    "APISettings",
]
