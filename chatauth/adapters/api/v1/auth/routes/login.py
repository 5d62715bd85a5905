"""Login endpoint module.

Credential checks, device registration and token issuance all happen in
`UserAuthenticationService.login`; this module only maps HTTP to it.
"""

import structlog
from fastapi import APIRouter, Request, status

from chatauth.adapters.api.v1.auth.schemas import AuthResponse, LoginRequest
from chatauth.infrastructure.dependency_injection.auth_dependencies import UserAuthenticationServiceDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Authenticate a user",
    description=(
        "Authenticates a user with email and password. Unknown emails and wrong "
        "passwords produce the same 401 response."
    ),
)
async def login_user(
    request: Request,
    payload: LoginRequest,
    auth_service: UserAuthenticationServiceDep,
) -> AuthResponse:
    """Authenticate with email and password.

    Raises:
        InvalidCredentialsError: 401 for an unknown email or a wrong password.
        AccountDisabledError: 403 for inactive accounts.
    """
    logger.debug(
        "Login requested",
        client_ip=request.client.host if request.client else None,
        with_device=bool(payload.device_token),
    )
    result = await auth_service.login(
        email=payload.email,
        password=payload.password,
        device_token=payload.device_token,
        device_type=payload.device_type,
        device_name=payload.device_name,
    )
    return AuthResponse.from_result(result)
