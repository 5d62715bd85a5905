"""Current user endpoint module."""

from fastapi import APIRouter, status

from chatauth.adapters.api.v1.auth.schemas import UserOut
from chatauth.core.dependencies.auth import CurrentUser

router = APIRouter()


@router.get(
    "",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Current user",
    description=(
        "Returns the public view of the user identified by the access token, "
        "read from the Authorization header or the accessToken cookie."
    ),
)
async def read_current_user(current_user: CurrentUser) -> UserOut:
    return UserOut.from_entity(current_user)
