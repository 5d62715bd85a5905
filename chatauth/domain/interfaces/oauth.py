"""Ports for talking to OAuth providers and protecting their tokens at rest."""

from abc import ABC, abstractmethod
from typing import Optional

from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.value_objects.oauth import ProviderProfile, ProviderTokens


class IOAuthProviderClient(ABC):
    """Contract shared by all OAuth exchange clients.

    Implementations are stateless between calls: every method performs at
    most one round trip to the provider and never retries.
    """

    provider: Provider

    @abstractmethod
    def build_authorization_url(self, state: Optional[str] = None) -> str:
        """Returns the provider consent URL the browser is redirected to."""
        raise NotImplementedError

    @abstractmethod
    async def exchange_code(self, code: str) -> ProviderTokens:
        """Exchanges an authorization code for provider tokens.

        Raises:
            OAuthExchangeFailedError: If the provider rejects the code or is unreachable.
        """
        raise NotImplementedError

    @abstractmethod
    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Retrieves the identity behind a provider access token.

        Raises:
            OAuthProfileFetchFailedError: If the profile cannot be retrieved.
        """
        raise NotImplementedError


class ITokenEncryptionService(ABC):
    """Symmetric encryption for provider tokens stored in the database."""

    @abstractmethod
    def encrypt(self, value: Optional[str]) -> Optional[bytes]:
        raise NotImplementedError

    @abstractmethod
    def decrypt(self, value: Optional[bytes]) -> Optional[str]:
        raise NotImplementedError
