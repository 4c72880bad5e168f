"""Configuration models using Pydantic for validation."""

from pathlib import Path
from typing import Dict, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
import structlog

logger = structlog.get_logger(__name__)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    format: str = Field(
        default="json",
        description="Log format: json or text",
    )
    third_party: Dict[str, str] = Field(
        default_factory=dict,
        description="Log levels for third-party libraries (advanced)",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid format: {v}. Must be one of {valid_formats}")
        return v_lower


class DatabaseConfig(BaseModel):
    """Configuration for the account store.

    The backend is selected explicitly; there is no automatic fallback from
    SQLite to memory when the database is unreachable.
    """

    backend: Literal["memory", "sqlite"] = Field(
        default="sqlite",
        description="Account store backend: memory or sqlite",
    )
    database_path: str = Field(
        default="zylorb.db",
        description="SQLite database file (sqlite backend only)",
    )
    connection_timeout: int = Field(
        default=30,
        ge=1,
        description="SQLite connection timeout in seconds",
    )

    def get_database_path(self) -> Path:
        """Return the database path with ``~`` expanded."""
        return Path(self.database_path).expanduser()


class Config(BaseModel):
    """Main configuration class for ZYLORB.

    Example:
        >>> config = Config.from_yaml(Path("config.yaml"))
        >>> config.database.backend
        'sqlite'
    """

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig,
        description="Account store configuration",
    )

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config object with validated configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML is invalid
            pydantic.ValidationError: If configuration is invalid
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        logger.debug("config_loaded", path=str(path))
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "Config":
        """
        Load configuration from YAML string.

        Example:
            >>> config = Config.from_yaml_string("database:\\n  backend: memory")
        """
        data = yaml.safe_load(yaml_string)
        return cls.model_validate(data or {})
