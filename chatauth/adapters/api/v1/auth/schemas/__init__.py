# flake8: noqa: F401 – re-export

from .requests import DeviceInfo, LoginRequest, LogoutRequest, RefreshRequest, RegisterRequest
from .responses import AuthResponse, MessageResponse, TokenPair, UserOut

__all__ = [
    "AuthResponse",
    "DeviceInfo",
    "LoginRequest",
    "LogoutRequest",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPair",
    "UserOut",
]
