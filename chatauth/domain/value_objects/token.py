"""Value objects produced by the token service."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import uuid

from pydantic import BaseModel


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenPair(BaseModel):
    """An access/refresh token pair as returned to clients.

    Attributes:
        access_token: Short-lived JWT authorizing API calls.
        refresh_token: Long-lived JWT exchangeable for a new pair.
        token_type: Always ``bearer``.
        expires_in: Lifetime of the access token in seconds.
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified claims of a JWT."""

    user_id: uuid.UUID
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str
