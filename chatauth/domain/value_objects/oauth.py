"""OAuth value objects.

`ProviderProfile` and `ProviderTokens` are the normalized, provider-agnostic
shapes that the exchange clients hand over to the identity reconciliation
engine. Neither carries any provider-specific field names.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from chatauth.utils.clock import utc_now


@dataclass(frozen=True, slots=True)
class ProviderProfile:
    """Identity reported by an OAuth provider.

    Attributes:
        id: The user's stable identifier at the provider.
        email: Email address, absent when the user declined the permission.
        name: Display name reported by the provider.
        picture: URL of the profile picture.
    """

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    picture: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Provider profile must contain an identifier")

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        full_name = " ".join(part for part in (self.given_name, self.family_name) if part)
        if full_name:
            return full_name
        if self.email:
            return self.email.split("@", 1)[0]
        return "User"


@dataclass(frozen=True, slots=True)
class ProviderTokens:
    """Tokens returned by a provider's token endpoint.

    Attributes:
        access_token: Provider access token.
        refresh_token: Provider refresh token. Providers only return it on the
            first consent, so None means "keep what was stored".
        expires_at: Absolute expiry of the access token, when reported.
    """

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_token_response(cls, data: Dict[str, Any], now: Optional[datetime] = None) -> "ProviderTokens":
        """Builds tokens from an OAuth 2.0 token response.

        ``expires_in`` (seconds) takes precedence; authlib's computed
        ``expires_at`` (epoch seconds) is used when only that is present.

        Raises:
            KeyError: If the response has no ``access_token``.
        """
        access_token = data["access_token"]
        if not access_token:
            raise ValueError("Token response contains an empty access token")

        now = now or utc_now()
        expires_at = None
        if data.get("expires_in") is not None:
            expires_at = now + timedelta(seconds=int(data["expires_in"]))
        elif data.get("expires_at") is not None:
            expires_at = datetime.fromtimestamp(int(data["expires_at"]), tz=now.tzinfo)

        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token") or None,
            expires_at=expires_at,
        )
