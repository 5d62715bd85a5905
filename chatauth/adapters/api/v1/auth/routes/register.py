"""Registration endpoint module.

The API layer stays thin: the payload is validated by `RegisterRequest` and
everything else is delegated to `UserAuthenticationService.register`.
"""

import structlog
from fastapi import APIRouter, status

from chatauth.adapters.api.v1.auth.schemas import AuthResponse, RegisterRequest
from chatauth.infrastructure.dependency_injection.auth_dependencies import UserAuthenticationServiceDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["auth"],
    summary="Register a new user",
    description=(
        "Creates an account with email and password, optionally registers the "
        "calling device, and returns the public user view with a token pair."
    ),
)
async def register_user(
    payload: RegisterRequest,
    auth_service: UserAuthenticationServiceDep,
) -> AuthResponse:
    """Register a new account.

    Raises:
        UserAlreadyExistsError: 409 when the email is taken.
        UsernameTakenError: 409 when the username is taken.
    """
    result = await auth_service.register(
        email=payload.email,
        password=payload.password,
        display_name=payload.display_name,
        username=payload.username,
        phone_number=payload.phone_number,
        bio=payload.bio,
        device_token=payload.device_token,
        device_type=payload.device_type,
        device_name=payload.device_name,
    )
    return AuthResponse.from_result(result)
