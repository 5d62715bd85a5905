from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from chatauth.domain.entities.auth_provider import AuthProvider
from chatauth.domain.entities.device import Device, DeviceType
from chatauth.domain.entities.types import enum_type
from chatauth.utils.clock import utc_now


class UserStatus(str, Enum):
    """Presence status recorded on every successful authentication."""

    ONLINE = "online"
    OFFLINE = "offline"
    AWAY = "away"
    BUSY = "busy"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class User(SQLModel, table=True):
    """Represents a User entity and acts as an Aggregate Root.

    The aggregate owns the linked provider identities (`AuthProvider`) and the
    registered push devices (`Device`); both are stored in their own tables and
    loaded eagerly with the user. Saving the user through the repository
    persists all pending changes to the three tables in one transaction.

    Accounts are created either by registration or by the first OAuth login
    and are never hard-deleted; deactivation (`is_active=False`) blocks every
    form of authentication.

    Attributes:
        id: Random UUID assigned at creation.
        email: Unique email address, stored lowercase.
        username: Optional unique handle.
        display_name: Name shown to other chat participants.
        hashed_password: Bcrypt hash. OAuth-created accounts get the hash of a
            random secret so the column is never empty. Deferred by the
            repository unless the login path asks for it.
        is_active: Inactive users cannot authenticate.
        is_verified: True for accounts whose email was vouched for by a provider.
        status: Presence status, set to online on authentication.
        last_seen: Timestamp of the last successful authentication.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="The unique identifier for the user.",
    )
    email: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Unique email address, normalized to lowercase.",
    )
    username: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Optional unique handle. NULLs never collide.",
    )
    display_name: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Name shown to other users.",
    )
    hashed_password: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Bcrypt hash of the password. Never serialized outward.",
    )
    avatar_url: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    phone_number: Optional[str] = Field(default=None, sa_column=Column(String(20), nullable=True))
    bio: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    is_active: bool = Field(default=True, nullable=False)
    is_verified: bool = Field(default=False, nullable=False)
    status: UserStatus = Field(
        default=UserStatus.OFFLINE,
        sa_column=Column(
            enum_type(UserStatus, "user_status"),
            nullable=False,
        ),
    )
    last_seen: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    theme: Theme = Field(
        default=Theme.LIGHT,
        sa_column=Column(
            enum_type(Theme, "user_theme"),
            nullable=False,
        ),
    )
    language: str = Field(default="vi", sa_column=Column(String(10), nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    providers: List[AuthProvider] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={
            "lazy": "selectin",
            "cascade": "all, delete-orphan",
            "order_by": "AuthProvider.created_at",
        },
    )
    devices: List[Device] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={
            "lazy": "selectin",
            "cascade": "all, delete-orphan",
            "order_by": "Device.created_at",
        },
    )

    def mark_authenticated(self) -> None:
        """Records a successful authentication: online status and fresh `last_seen`."""
        now = utc_now()
        self.status = UserStatus.ONLINE
        self.last_seen = now
        self.updated_at = now

    def find_provider(self, provider: str, provider_id: str) -> Optional[AuthProvider]:
        for entry in self.providers:
            if _value(entry.provider) == _value(provider) and entry.provider_id == provider_id:
                return entry
        return None

    def upsert_device(
        self,
        device_token: str,
        device_type: Optional[DeviceType] = None,
        device_name: Optional[str] = None,
    ) -> Device:
        """Registers a push device, updating the existing entry for the same token in place.

        Args:
            device_token: Push token reported by the client.
            device_type: Platform of the device, ``web`` when omitted.
            device_name: Optional human label.

        Returns:
            The created or refreshed `Device`.
        """
        now = utc_now()
        for device in self.devices:
            if device.device_token == device_token:
                if device_type is not None:
                    device.device_type = DeviceType(device_type)
                if device_name is not None:
                    device.device_name = device_name
                device.is_active = True
                device.last_used_at = now
                return device

        device = Device(
            device_token=device_token,
            device_type=DeviceType(device_type) if device_type is not None else DeviceType.WEB,
            device_name=device_name,
            is_active=True,
            last_used_at=now,
            created_at=now,
        )
        self.devices.append(device)
        return device

    def remove_device(self, device_token: str) -> bool:
        """Removes the device registered under ``device_token``.

        Returns:
            True if a device was removed, False if the token was unknown.
        """
        for device in list(self.devices):
            if device.device_token == device_token:
                self.devices.remove(device)
                return True
        return False

    @property
    def provider_names(self) -> List[str]:
        return [_value(entry.provider) for entry in self.providers]


def _value(member) -> str:
    return member.value if isinstance(member, Enum) else member
