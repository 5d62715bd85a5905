"""Response Pydantic model for user data."""

from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import BaseModel

from chatauth.domain.entities.user import Theme, User, UserStatus


class UserOut(BaseModel):
    """Public representation of :class:`~chatauth.domain.entities.user.User`.

    Password hashes, provider tokens and devices are never part of it; linked
    providers are exposed by name only.
    """

    id: uuid.UUID
    email: str
    username: Optional[str] = None
    display_name: str
    avatar_url: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool
    is_verified: bool
    status: UserStatus
    last_seen: Optional[datetime] = None
    theme: Theme
    language: str
    providers: List[str] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            phone_number=user.phone_number,
            bio=user.bio,
            is_active=user.is_active,
            is_verified=user.is_verified,
            status=user.status,
            last_seen=user.last_seen,
            theme=user.theme,
            language=user.language,
            providers=user.provider_names,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
