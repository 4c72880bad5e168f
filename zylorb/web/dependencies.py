"""FastAPI dependency injection for settings, the gateway, and authentication."""

from typing import Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from zylorb.auth import AuthGateway
from zylorb.core.db import AccountStore
from zylorb.core.models import Account

from .settings import APISettings

logger = structlog.get_logger(__name__)

# Optional bearer scheme. A missing header, or one with another scheme such as
# Basic, yields no credentials and is reported by require_account as 401.
optional_bearer = HTTPBearer(auto_error=False)


def get_api_settings(request: Request) -> APISettings:
    """Dependency that provides the settings the app was created with."""
    return request.app.state.settings


def get_account_store(request: Request) -> AccountStore:
    """Dependency that provides the account store constructed at startup."""
    return request.app.state.store


def get_gateway(request: Request) -> AuthGateway:
    """
    Dependency that provides the AuthGateway.

    Example:
        @router.post("/api/login")
        async def login(gateway: AuthGateway = Depends(get_gateway)):
            ...
    """
    return request.app.state.gateway


async def require_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
    gateway: AuthGateway = Depends(get_gateway),
) -> Account:
    """
    Dependency that requires a valid bearer token.

    Raises:
        UnauthorizedError: If no token was sent (401) or its account is gone (401)
        TokenError: If the token is malformed, forged or expired (403)

    Example:
        @router.get("/api/me")
        async def me(account: Account = Depends(require_account)):
            return account.public_view()
    """
    token = credentials.credentials if credentials else None
    return await gateway.authenticate(token)
