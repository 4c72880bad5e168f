"""Authentication routes for registration and login."""

import structlog
from fastapi import APIRouter, Depends, status

from zylorb.auth import AuthGateway, AuthResponse, LoginRequest, RegisterRequest

from ..dependencies import get_gateway
from ..schemas.common import ERROR_RESPONSES

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    responses={
        201: {"description": "Account created; token issued"},
        400: {**ERROR_RESPONSES[400], "description": "Invalid input or duplicate account"},
        429: ERROR_RESPONSES[429],
    },
)
async def register(
    register_request: RegisterRequest,
    gateway: AuthGateway = Depends(get_gateway),
) -> AuthResponse:
    """
    Register a new account and return a bearer token.

    Username must be 3-30 letters, numbers or underscores; the email must
    look like an address; the password needs at least 6 characters.
    Username and email must both be unused.
    """
    result = await gateway.register(
        username=register_request.username,
        email=register_request.email,
        password=register_request.password,
    )
    return AuthResponse(
        message="User registered successfully! 🎉",
        token=result.token,
        user=result.account,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    responses={
        200: {"description": "Successful authentication; token issued"},
        400: {**ERROR_RESPONSES[400], "description": "Invalid email or password"},
        429: ERROR_RESPONSES[429],
    },
)
async def login(
    login_request: LoginRequest,
    gateway: AuthGateway = Depends(get_gateway),
) -> AuthResponse:
    """
    Authenticate with email and password and return a bearer token.

    The same error is returned whether the email is unknown or the
    password is wrong. Tokens are valid for 24 hours and cannot be revoked
    early; logging out means discarding the token client-side.
    """
    result = await gateway.login(email=login_request.email, password=login_request.password)
    return AuthResponse(
        message="Login successful! 🎉",
        token=result.token,
        user=result.account,
    )
