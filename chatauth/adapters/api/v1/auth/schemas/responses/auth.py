"""Composite response Pydantic models for authentication endpoints."""

from pydantic import BaseModel

from chatauth.adapters.api.v1.auth.schemas.responses.token import TokenPair
from chatauth.adapters.api.v1.auth.schemas.responses.user import UserOut
from chatauth.domain.services.auth.user_authentication import AuthResult


class AuthResponse(BaseModel):
    """Response returned by register, login and refresh endpoints."""

    user: UserOut
    tokens: TokenPair

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(user=UserOut.from_entity(result.user), tokens=result.tokens)


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
