"""Factory for generating fake OAuth data for testing."""

from __future__ import annotations

from typing import Optional

from faker import Faker

from chatauth.domain.value_objects.oauth import ProviderProfile, ProviderTokens

fake = Faker()

_UNSET = object()


def create_fake_profile(
    id: Optional[str] = None,
    email=_UNSET,
    name: Optional[str] = None,
    picture: Optional[str] = None,
) -> ProviderProfile:
    """Create a fake provider profile.

    Args:
        id (Optional[str]): Provider user id, defaults to a random numeric string.
        email: Email, defaults to a unique fake email. Pass None for a profile without email.
        name (Optional[str]): Display name, defaults to a fake full name.
        picture (Optional[str]): Avatar URL, defaults to a fake image URL.

    Returns:
        ProviderProfile: The profile.
    """
    return ProviderProfile(
        id=id if id is not None else str(fake.random_number(digits=18, fix_len=True)),
        email=fake.unique.email() if email is _UNSET else email,
        name=name if name is not None else fake.name(),
        picture=picture if picture is not None else fake.image_url(),
    )


def create_fake_provider_tokens(
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
) -> ProviderTokens:
    """Create fake provider tokens; no refresh token unless one is given."""
    return ProviderTokens(
        access_token=access_token if access_token is not None else fake.sha256(),
        refresh_token=refresh_token,
    )
