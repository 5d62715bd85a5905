"""Token refresh endpoint module."""

from fastapi import APIRouter, status

from chatauth.adapters.api.v1.auth.schemas import AuthResponse, RefreshRequest
from chatauth.infrastructure.dependency_injection.auth_dependencies import UserAuthenticationServiceDep

router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Rotate the token pair",
    description="Exchanges a refresh token for a new access and refresh token.",
)
async def refresh_tokens(
    payload: RefreshRequest,
    auth_service: UserAuthenticationServiceDep,
) -> AuthResponse:
    """Rotate both tokens.

    Raises:
        WrongTokenTypeError: 401 with code ``invalid_token_type`` for access tokens.
        InvalidRefreshTokenError: 401 for invalid or expired tokens and unknown
            or inactive users.
    """
    result = await auth_service.refresh(payload.refresh_token)
    return AuthResponse.from_result(result)
