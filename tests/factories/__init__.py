"""Re-export factory functions for generating fake test data."""

from __future__ import annotations

# flake8: noqa: F401 – re-export

from .oauth import create_fake_profile, create_fake_provider_tokens
from .user import DEFAULT_PASSWORD, create_fake_registration, create_fake_user

__all__ = [
    "DEFAULT_PASSWORD",
    "create_fake_user",
    "create_fake_registration",
    "create_fake_profile",
    "create_fake_provider_tokens",
]
