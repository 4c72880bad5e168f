"""Middleware and exception handlers for the FastAPI application."""

import time
import uuid
from typing import Callable, Optional

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

from zylorb.auth import RequestThrottle
from zylorb.common.logging_config import bind_context, clear_context
from zylorb.core.exceptions import RateLimitedError, TokenError, ZylorbError

logger = structlog.get_logger(__name__)


def get_client_ip(request: Request, trusted_proxy_count: int = 0) -> str:
    """Extract client IP from request, considering trusted proxies.

    Only parses X-Forwarded-For when trusted_proxy_count > 0.
    Takes the Nth-from-right IP where N = trusted_proxy_count.
    """
    if trusted_proxy_count > 0:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            ips = [ip.strip() for ip in forwarded.split(",")]
            index = max(0, len(ips) - trusted_proxy_count)
            return ips[index]
    return request.client.host if request.client else "unknown"


def error_response(exc: ZylorbError) -> JSONResponse:
    """Render an API error as ``{"message", "error_type"}``."""
    headers = {}
    if isinstance(exc, TokenError):
        # The specific token failure is never revealed to the caller
        message = TokenError.public_message
    else:
        message = exc.message
    if exc.status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"
    if isinstance(exc, RateLimitedError):
        headers["Retry-After"] = str(exc.retry_after)

    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message, "error_type": exc.error_type},
        headers=headers or None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers for the FastAPI application.

    Every error reaches the caller as JSON with a human-readable
    ``message``:
    - ZylorbError subclasses -> their own status code (400/401/403/429/502)
    - Request body validation errors -> 400
    - HTTPException (404, 405, ...) -> its status code
    - Anything else -> 500 without internals

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ZylorbError)
    async def zylorb_error_handler(request: Request, exc: ZylorbError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "request_rejected",
            error_type=exc.error_type,
            reason=type(exc).__name__,
            status_code=exc.status_code,
            path=str(request.url.path),
        )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        logger.warning(
            "validation_error",
            errors=[{"loc": list(err["loc"]), "type": err["type"]} for err in errors],
            path=str(request.url.path),
        )
        missing = any(err["type"] == "missing" for err in errors)
        return JSONResponse(
            status_code=400,
            content={
                "message": "All fields are required" if missing else "Invalid request body",
                "error_type": "validation_error",
                "errors": [
                    {
                        "loc": list(err["loc"]),
                        "msg": err["msg"],
                        "type": err["type"],
                    }
                    for err in errors
                ],
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail), "error_type": "http_error"},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=str(request.url.path))
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error", "error_type": "server_error"},
        )


class PreflightCORSMiddleware(CORSMiddleware):
    """
    CORS middleware whose preflights always answer 200.

    A preflight the policy rejects (unlisted origin, method or header) gets
    an empty 200 with no ``Access-Control-Allow-*`` headers, so the browser
    still blocks the real request.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            logger.info(
                "cors_preflight_rejected",
                origin=request_headers.get("origin"),
                method=request_headers.get("access-control-request-method"),
            )
            return Response(status_code=200)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Apply the per-address request ceiling before routing.

    OPTIONS requests are answered with 200 without being counted. With no
    throttle the middleware only answers OPTIONS.
    """

    def __init__(
        self,
        app: ASGIApp,
        throttle: Optional[RequestThrottle],
        trusted_proxy_count: int = 0,
    ):
        super().__init__(app)
        self.throttle = throttle
        self.trusted_proxy_count = trusted_proxy_count

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200)
        if self.throttle is None:
            return await call_next(request)

        client_ip = get_client_ip(request, self.trusted_proxy_count)
        if not self.throttle.allow(client_ip):
            return error_response(
                RateLimitedError(retry_after=self.throttle.retry_after(client_ip))
            )

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Log request details and response status."""
        start_time = time.perf_counter()
        clear_context()
        bind_context(request_id=uuid.uuid4().hex[:12])

        logger.info(
            "request_started",
            method=request.method,
            path=str(request.url.path),
            query=str(request.url.query) if request.url.query else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = time.perf_counter() - start_time
            logger.error(
                "request_failed",
                method=request.method,
                path=str(request.url.path),
                error=str(exc),
                duration_ms=round(duration * 1000, 2),
            )
            raise

        duration = time.perf_counter() - start_time
        logger.info(
            "request_completed",
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        return response
