from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
import uuid

from sqlalchemy import Column, DateTime, LargeBinary, String, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from chatauth.domain.entities.types import enum_type
from chatauth.utils.clock import utc_now

if TYPE_CHECKING:
    from chatauth.domain.entities.user import User


class Provider(str, Enum):
    """A Value Object representing the supported OAuth providers.

    Attributes:
        GOOGLE: Represents the Google OAuth 2.0 provider.
        FACEBOOK: Represents the Facebook Login (OAuth 2.0) provider.
    """

    GOOGLE = "google"
    FACEBOOK = "facebook"


class AuthProvider(SQLModel, table=True):
    """Represents a link between a User and an external OAuth provider.

    One row exists per `(provider, provider_id)` pair; the unique index makes
    it impossible for two users to claim the same external identity. The
    provider's access and refresh tokens are Fernet-encrypted before they are
    assigned here and are never exposed outside the domain.

    Attributes:
        provider: The OAuth provider this entry is for.
        provider_id: The user's identifier at the provider.
        provider_email: Email reported by the provider at the last login.
        access_token: Encrypted provider access token.
        refresh_token: Encrypted provider refresh token, when one was issued.
        expires_at: Expiry of the provider access token, when reported.
    """

    __tablename__ = "auth_providers"
    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_auth_providers_provider_identity"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        nullable=False,
        index=True,
        description="Foreign key linking this entry to a User.",
    )
    provider: Provider = Field(
        sa_column=Column(enum_type(Provider, "auth_provider"), nullable=False),
    )
    provider_id: str = Field(sa_column=Column(String(255), nullable=False))
    provider_email: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    access_token: Optional[bytes] = Field(default=None, sa_column=Column(LargeBinary, nullable=True))
    refresh_token: Optional[bytes] = Field(default=None, sa_column=Column(LargeBinary, nullable=True))
    expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    user: Optional["User"] = Relationship(back_populates="providers")
