"""Routes for the authenticated account."""

from fastapi import APIRouter, Depends

from zylorb.auth import AccountResponse, AuthGateway, ProfileUpdateRequest
from zylorb.core.models import Account

from ..dependencies import get_gateway, require_account
from ..schemas.common import AUTH_ERROR_RESPONSES, ERROR_RESPONSES

router = APIRouter(prefix="/api", tags=["Accounts"], responses=AUTH_ERROR_RESPONSES)


@router.get(
    "/me",
    response_model=AccountResponse,
    response_model_exclude_none=True,
    summary="Get the current account",
)
async def get_me(account: Account = Depends(require_account)) -> AccountResponse:
    """Return the public view of the account the bearer token belongs to."""
    return AccountResponse(user=account.public_view())


@router.patch(
    "/me",
    response_model=AccountResponse,
    summary="Update the current account's profile",
    responses={400: ERROR_RESPONSES[400]},
)
async def update_me(
    update_request: ProfileUpdateRequest,
    account: Account = Depends(require_account),
    gateway: AuthGateway = Depends(get_gateway),
) -> AccountResponse:
    """
    Change the avatar and/or zone of the current account.

    Zone must be one of general, gaming, life, culture or professional.
    """
    account = await gateway.update_profile(
        account,
        avatar=update_request.avatar,
        zone=update_request.zone,
    )
    return AccountResponse(message="Profile updated successfully", user=account.public_view())
