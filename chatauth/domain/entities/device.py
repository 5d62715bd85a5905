from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
import uuid

from sqlalchemy import Column, DateTime, String, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from chatauth.domain.entities.types import enum_type
from chatauth.utils.clock import utc_now

if TYPE_CHECKING:
    from chatauth.domain.entities.user import User


class DeviceType(str, Enum):
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class Device(SQLModel, table=True):
    """A push-notification endpoint registered by one of the user's clients.

    Devices are keyed by `(user_id, device_token)`: logging in again from the
    same device refreshes the existing row instead of adding another one.
    """

    __tablename__ = "devices"
    __table_args__ = (
        UniqueConstraint("user_id", "device_token", name="uq_devices_user_token"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    device_token: str = Field(sa_column=Column(String(512), nullable=False))
    device_type: DeviceType = Field(
        default=DeviceType.WEB,
        sa_column=Column(enum_type(DeviceType, "device_type"), nullable=False),
    )
    device_name: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))
    is_active: bool = Field(default=True, nullable=False)
    last_used_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    user: Optional["User"] = Relationship(back_populates="devices")
