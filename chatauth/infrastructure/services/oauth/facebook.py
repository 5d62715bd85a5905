"""Facebook Login exchange client (Graph API v18.0)."""

from typing import Dict, Optional

from chatauth.core.config.settings import settings
from chatauth.core.exceptions import OAuthExchangeFailedError, OAuthProfileFetchFailedError
from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.value_objects.oauth import ProviderProfile, ProviderTokens
from chatauth.infrastructure.services.oauth.base import PROVIDER_ERRORS, BaseOAuthProviderClient

PROFILE_FIELDS = "id,email,name,picture.type(large),first_name,last_name"


class FacebookOAuthClient(BaseOAuthProviderClient):
    """Authorization code flow against the Facebook Graph API.

    Facebook's token endpoint is queried with GET and its short-lived user
    tokens can be traded for long-lived ones with `upgrade_to_long_lived_token`.
    Facebook never issues refresh tokens.
    """

    provider = Provider.FACEBOOK

    AUTHORIZATION_URL = "https://www.facebook.com/v18.0/dialog/oauth"
    TOKEN_URL = "https://graph.facebook.com/v18.0/oauth/access_token"
    PROFILE_URL = "https://graph.facebook.com/v18.0/me"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        scopes=None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            client_id=client_id if client_id is not None else settings.FACEBOOK_APP_ID,
            client_secret=(
                client_secret if client_secret is not None else settings.FACEBOOK_APP_SECRET.get_secret_value()
            ),
            redirect_uri=redirect_uri or settings.FACEBOOK_REDIRECT_URI,
            scopes=scopes or settings.FACEBOOK_SCOPES,
            timeout=timeout,
        )

    def _authorization_params(self, state: Optional[str]) -> Dict[str, str]:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": ",".join(self.scopes),
            "response_type": "code",
        }
        if state:
            params["state"] = state
        return params

    async def _token_request(self, params: Dict[str, str]) -> ProviderTokens:
        async with self._session() as client:
            response = await client.request("GET", self.TOKEN_URL, params=params, withhold_token=True)
            response.raise_for_status()
            data = response.json()
        return ProviderTokens.from_token_response(data)

    async def exchange_code(self, code: str) -> ProviderTokens:
        """Exchanges an authorization code at the Graph API token endpoint (GET).

        Raises:
            OAuthExchangeFailedError: If Facebook rejects the code or cannot be reached.
        """
        params = {
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "redirect_uri": self.redirect_uri,
            "code": code,
        }
        try:
            return await self._token_request(params)
        except PROVIDER_ERRORS as e:
            self._log_failure("exchange_code", e)
            raise OAuthExchangeFailedError(self.provider.value, detail=str(e)) from e

    async def upgrade_to_long_lived_token(self, short_lived_token: str) -> ProviderTokens:
        """Trades a short-lived user token for a long-lived one (about 60 days).

        Raises:
            OAuthExchangeFailedError: If the exchange fails.
        """
        params = {
            "grant_type": "fb_exchange_token",
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "fb_exchange_token": short_lived_token,
        }
        try:
            return await self._token_request(params)
        except PROVIDER_ERRORS as e:
            self._log_failure("upgrade_to_long_lived_token", e)
            raise OAuthExchangeFailedError(self.provider.value, detail=str(e)) from e

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Reads the user's profile from ``/me``.

        Raises:
            OAuthProfileFetchFailedError: If the profile cannot be retrieved.
        """
        params = {"fields": PROFILE_FIELDS, "access_token": access_token}
        try:
            async with self._session() as client:
                response = await client.request("GET", self.PROFILE_URL, params=params, withhold_token=True)
                response.raise_for_status()
                data = response.json()
            picture = (data.get("picture") or {}).get("data") or {}
            return ProviderProfile(
                id=str(data["id"]),
                email=data.get("email"),
                name=data.get("name"),
                given_name=data.get("first_name"),
                family_name=data.get("last_name"),
                picture=picture.get("url"),
            )
        except PROVIDER_ERRORS as e:
            self._log_failure("fetch_profile", e)
            raise OAuthProfileFetchFailedError(self.provider.value, detail=str(e)) from e
