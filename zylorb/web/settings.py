"""API-specific settings using Pydantic BaseSettings."""

from functools import lru_cache
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """
    FastAPI application settings.

    Settings can be configured via environment variables with the prefix ZYLORB_API_.
    For example: ZYLORB_API_HOST=0.0.0.0, ZYLORB_API_JWT_SECRET=...

    Attributes:
        host: Server bind address
        port: Server bind port
        debug: Enable debug mode (auto-reload, verbose errors)
        allowed_origins: List of allowed CORS origins
        log_requests: Log all requests and responses
        openapi_url: OpenAPI schema URL
        config_path: Optional YAML file with logging and database configuration
        jwt_secret: Secret key for token signing (always required, fixed for the
            process lifetime; changing it invalidates all issued tokens)
        jwt_algorithm: JWT signing algorithm (default: HS256)
        password_hash_rounds: bcrypt work factor (default: 12)
        rate_limit_enabled: Apply the per-address request ceiling
        rate_limit_max_requests: Requests allowed per window (default: 100)
        rate_limit_window_seconds: Window length in seconds (default: 900 = 15 min)
        trusted_proxy_count: Number of trusted proxies for X-Forwarded-For parsing (default: 0)
    """

    model_config = SettingsConfigDict(
        env_prefix="ZYLORB_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False
    allowed_origins: List[str] = ["*"]
    log_requests: bool = True
    openapi_url: str = "/openapi.json"
    config_path: Optional[str] = None

    # Authentication settings
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    password_hash_rounds: int = 12

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 900

    # Proxy settings for IP extraction
    trusted_proxy_count: int = 0

    @model_validator(mode="after")
    def validate_security_config(self) -> "APISettings":
        """Validate authentication and rate limit configuration.

        - jwt_secret is ALWAYS required (no default, no per-start generation)
        - bcrypt accepts work factors from 4 to 31
        - rate limit window and ceiling must be positive
        """
        if not self.jwt_secret:
            raise ValueError(
                "ZYLORB_API_JWT_SECRET must be set. "
                'Generate a secure secret with: python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )

        if not 4 <= self.password_hash_rounds <= 31:
            raise ValueError("ZYLORB_API_PASSWORD_HASH_ROUNDS must be between 4 and 31")

        if self.rate_limit_max_requests < 1 or self.rate_limit_window_seconds < 1:
            raise ValueError("Rate limit ceiling and window must both be at least 1")

        return self


@lru_cache
def get_settings() -> APISettings:
    """
    Get cached API settings instance.

    Returns:
        APISettings instance (cached)
    """
    return APISettings()
