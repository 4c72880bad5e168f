"""FastAPI application factory and entry point."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator, Optional

import structlog
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.openapi.utils import get_openapi

import zylorb
from zylorb.auth import AuthGateway, RequestThrottle, TokenCodec
from zylorb.common.config import Config
from zylorb.common.logging_config import setup_logging
from zylorb.core.db import AccountStore, create_account_store

from .dependencies import get_account_store
from .middleware import (
    PreflightCORSMiddleware,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    register_exception_handlers,
)
from .schemas.common import HealthCheckResponse
from .settings import APISettings, get_settings

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Opens the account store on startup and closes it on shutdown. A store
    that cannot be opened aborts startup.
    """
    settings: APISettings = app.state.settings
    store: AccountStore = app.state.store

    logger.info("api_starting", host=settings.host, port=settings.port)
    await store.connect()

    logger.info(
        "api_ready",
        version=zylorb.__version__,
        database=store.backend_name,
        rate_limit_enabled=settings.rate_limit_enabled,
        debug=settings.debug,
    )

    yield

    logger.info("api_shutting_down")
    await store.close()


def _load_config(settings: APISettings) -> Config:
    if settings.config_path:
        return Config.from_yaml(Path(settings.config_path))
    return Config()


def create_app(
    settings: Optional[APISettings] = None,
    config: Optional[Config] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The account store, token codec, gateway and rate limiter are built
    once here and kept on ``app.state`` for the life of the app.

    Args:
        settings: API settings (default: read from ZYLORB_API_* environment)
        config: Logging and database configuration (default: loaded from
            ``settings.config_path`` or built-in defaults)

    Returns:
        Configured FastAPI application instance

    Example:
        from fastapi.testclient import TestClient
        app = create_app(settings=APISettings(jwt_secret="test"))
        with TestClient(app) as client:
            client.get("/api/health")
    """
    settings = settings or get_settings()
    config = config or _load_config(settings)

    setup_logging(config.logging)

    app = FastAPI(
        title="ZYLORB API",
        version=zylorb.__version__,
        description="""Account registration, login and token authentication for ZYLORB.

## Authentication

Protected endpoints require a Bearer token in the `Authorization` header:

```
Authorization: Bearer <token>
```

Obtain a token via `POST /api/register` or `POST /api/login`. Tokens are
valid for 24 hours and cannot be revoked early; to log out, discard the token.

## Rate limiting

Every request (except `OPTIONS`) counts toward a per-address ceiling of
100 requests per 15 minutes. Requests over the ceiling receive `429` with a
`Retry-After` header.
""",
        openapi_url=settings.openapi_url,
        openapi_tags=[
            {
                "name": "Health",
                "description": "Health check and status endpoints",
            },
            {
                "name": "Authentication",
                "description": "Account registration and login",
            },
            {
                "name": "Accounts",
                "description": "The authenticated account's profile",
            },
        ],
        lifespan=lifespan,
        debug=settings.debug,
    )

    store = create_account_store(config.database)
    codec = TokenCodec(secret_key=settings.jwt_secret, algorithm=settings.jwt_algorithm)

    app.state.settings = settings
    app.state.config = config
    app.state.store = store
    app.state.gateway = AuthGateway(
        store=store,
        codec=codec,
        hash_rounds=settings.password_hash_rounds,
    )
    app.state.throttle = RequestThrottle(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    # Middleware added last runs first: CORS, then logging, then rate limiting
    app.add_middleware(
        RateLimitMiddleware,
        throttle=app.state.throttle if settings.rate_limit_enabled else None,
        trusted_proxy_count=settings.trusted_proxy_count,
    )

    if settings.log_requests:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get(
        "/api/health",
        tags=["Health"],
        summary="Health check",
        response_model=HealthCheckResponse,
        response_description="Health status of the API",
    )
    async def health_check(
        store: AccountStore = Depends(get_account_store),
    ) -> HealthCheckResponse:
        """Return the API version, server time and account store backend."""
        return HealthCheckResponse(
            message="🚀 ZYLORB API is running!",
            version=zylorb.__version__,
            timestamp=datetime.now(timezone.utc).isoformat(),
            database=store.backend_name,
        )

    from .routes import accounts, auth

    app.include_router(auth.router)
    app.include_router(accounts.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
            tags=app.openapi_tags,
        )
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Token obtained from POST /api/register or POST /api/login",
            }
        }
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    logger.info("api_app_created", routes=len(app.routes), database=store.backend_name)

    return app


def run() -> None:
    """
    Run the API server with uvicorn.

    This is the entry point for the zylorb-api script.
    """
    settings = get_settings()

    uvicorn.run(
        "zylorb.web.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
