from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chatauth.core.exceptions import AuthenticationError
from chatauth.domain.entities.user import User
from chatauth.infrastructure.dependency_injection.auth_dependencies import UserAuthenticationServiceDep

__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "REFRESH_TOKEN_COOKIE",
    "CurrentUser",
    "get_access_token",
    "get_current_user",
]

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

bearer_scheme = HTTPBearer(auto_error=False)


def get_access_token(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> str:
    """Return the access token from the ``Authorization: Bearer`` header or the cookie.

    The header wins when both are present.

    Raises:
        AuthenticationError: If neither carries a token.
    """
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    raise AuthenticationError("Access token required", code="missing_token")


async def get_current_user(
    token: Annotated[str, Depends(get_access_token)],
    auth_service: UserAuthenticationServiceDep,
) -> User:
    """Return the authenticated, active :class:`~chatauth.domain.entities.user.User`."""
    return await auth_service.get_current_user(token)


CurrentUser = Annotated[User, Depends(get_current_user)]
