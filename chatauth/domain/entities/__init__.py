"""Table models of the user aggregate.

Importing this package registers every table on ``SQLModel.metadata``.
"""

from chatauth.domain.entities.auth_provider import AuthProvider, Provider
from chatauth.domain.entities.device import Device, DeviceType
from chatauth.domain.entities.user import Theme, User, UserStatus

__all__ = [
    "AuthProvider",
    "Device",
    "DeviceType",
    "Provider",
    "Theme",
    "User",
    "UserStatus",
]
