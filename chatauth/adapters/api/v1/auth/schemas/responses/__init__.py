"""Re-export response models for authentication endpoints."""

# flake8: noqa: F401 – re-export

from .auth import AuthResponse, MessageResponse
from .token import TokenPair
from .user import UserOut

__all__ = [
    "AuthResponse",
    "MessageResponse",
    "TokenPair",
    "UserOut",
]
