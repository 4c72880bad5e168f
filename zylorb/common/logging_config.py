"""Logging configuration using structlog for structured logging."""

import logging
from typing import Any

import structlog

from .config import LoggingConfig


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure logging based on configuration.

    Sets up structlog on top of standard library logging so that records
    from uvicorn and other libraries share the same handlers and level.

    Args:
        config: LoggingConfig object with logging settings

    Example:
        >>> from zylorb.common.config import LoggingConfig
        >>> setup_logging(LoggingConfig(level="DEBUG", format="text"))
    """
    log_level = getattr(logging, config.level.upper())

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[],
        force=True,
    )

    default_third_party = {
        "aiosqlite": "WARNING",
        "uvicorn.access": "WARNING",
    }
    third_party_config = {**default_third_party, **config.third_party}

    for library, level in third_party_config.items():
        logging.getLogger(library).setLevel(getattr(logging, level.upper()))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.setLevel(log_level)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structlog logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("operation_complete", status="success")
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """
    Bind context variables included in all subsequent log messages.

    Used by the request logging middleware to tag events with the request
    id and client address.

    Example:
        >>> bind_context(request_id="abc-123")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
