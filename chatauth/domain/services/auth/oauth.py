from typing import Mapping, Optional

from structlog import get_logger

from chatauth.core.config.settings import settings
from chatauth.core.exceptions import OAuthCallbackError
from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.interfaces.oauth import IOAuthProviderClient
from chatauth.domain.services.auth.identity_reconciliation import (
    IdentityReconciliationService,
    ReconciliationResult,
)

logger = get_logger(__name__)


class OAuthService:
    """Service driving the OAuth 2.0 authorization code flow for every provider.

    The service builds consent URLs and turns provider callbacks into local
    sessions: code exchange, (Facebook) long-lived token upgrade, profile
    fetch, then identity reconciliation. Each provider call is attempted
    exactly once.

    Attributes:
        clients (Mapping[Provider, IOAuthProviderClient]): Exchange client per provider.
        reconciliation (IdentityReconciliationService): Maps identities to users.
        facebook_long_lived_token (bool): Upgrade Facebook tokens after the exchange.
    """

    def __init__(
        self,
        clients: Mapping[Provider, IOAuthProviderClient],
        reconciliation: IdentityReconciliationService,
        facebook_long_lived_token: Optional[bool] = None,
    ):
        self.clients = dict(clients)
        self.reconciliation = reconciliation
        self.facebook_long_lived_token = (
            settings.FACEBOOK_LONG_LIVED_TOKEN if facebook_long_lived_token is None else facebook_long_lived_token
        )

    def client_for(self, provider: Provider | str) -> IOAuthProviderClient:
        return self.clients[Provider(provider)]

    def authorization_url(self, provider: Provider | str, state: Optional[str] = None) -> str:
        """Returns the consent URL for ``provider``, carrying ``state`` when given."""
        return self.client_for(provider).build_authorization_url(state=state)

    async def handle_callback(
        self,
        provider: Provider | str,
        code: Optional[str] = None,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ) -> ReconciliationResult:
        """Completes a federated login from the provider's redirect.

        Args:
            provider: Provider that redirected back.
            code: Authorization code, absent when the user denied consent.
            error: Error code reported by the provider.
            error_description: Human readable provider diagnostic.

        Returns:
            ReconciliationResult: The user, a token pair and the new-user flag.

        Raises:
            OAuthCallbackError: If the provider reported an error or sent no code.
            OAuthExchangeFailedError: If the code exchange or token upgrade failed.
            OAuthProfileFetchFailedError: If the profile could not be fetched.
            EmailRequiredFromProviderError: If a new identity came without an email.
        """
        provider = Provider(provider)
        if error:
            raise OAuthCallbackError(
                provider.value,
                detail=error_description or error,
                message=f"OAuth authorization failed: {error}",
            )
        if not code:
            raise OAuthCallbackError(provider.value, detail="missing authorization code")

        client = self.client_for(provider)
        provider_tokens = await client.exchange_code(code)
        if provider is Provider.FACEBOOK and self.facebook_long_lived_token:
            provider_tokens = await client.upgrade_to_long_lived_token(provider_tokens.access_token)

        profile = await client.fetch_profile(provider_tokens.access_token)
        result = await self.reconciliation.reconcile(profile, provider, provider_tokens)

        logger.info(
            "OAuth login completed",
            provider=provider.value,
            user_id=str(result.user.id),
            is_new_user=result.is_new_user,
        )
        return result
