"""Logout endpoint module.

Tokens are stateless, so logging out means forgetting the calling device (when
one is named) and clearing the token cookies. The call always succeeds for an
authenticated user.
"""

from typing import Optional

from fastapi import APIRouter, Response, status

from chatauth.adapters.api.v1.auth.schemas import LogoutRequest, MessageResponse
from chatauth.adapters.api.v1.auth.utils import clear_auth_cookies
from chatauth.core.dependencies.auth import CurrentUser
from chatauth.infrastructure.dependency_injection.auth_dependencies import UserAuthenticationServiceDep

router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Log out",
    description="Removes the named device, if any, and clears the token cookies.",
)
async def logout_user(
    response: Response,
    current_user: CurrentUser,
    auth_service: UserAuthenticationServiceDep,
    payload: Optional[LogoutRequest] = None,
) -> MessageResponse:
    await auth_service.logout(current_user, device_token=payload.device_token if payload else None)
    clear_auth_cookies(response)
    return MessageResponse(message="Logged out successfully")
