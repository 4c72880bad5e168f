"""Common utilities and shared components for ZYLORB."""

from .config import Config, DatabaseConfig, LoggingConfig
from .logging_config import bind_context, clear_context, get_logger, setup_logging

__all__ = [
    "Config",
    "DatabaseConfig",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
