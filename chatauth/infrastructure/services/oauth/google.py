"""Google OAuth 2.0 exchange client."""

from typing import Dict, Optional

from chatauth.core.config.settings import settings
from chatauth.core.exceptions import OAuthExchangeFailedError, OAuthProfileFetchFailedError
from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.value_objects.oauth import ProviderProfile, ProviderTokens
from chatauth.infrastructure.services.oauth.base import PROVIDER_ERRORS, BaseOAuthProviderClient


class GoogleOAuthClient(BaseOAuthProviderClient):
    """Authorization code flow against Google's OAuth 2.0 endpoints.

    Offline access with a forced consent prompt is requested so that Google
    returns a refresh token on every consent.
    """

    provider = Provider.GOOGLE

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        scopes=None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            client_id=client_id if client_id is not None else settings.GOOGLE_CLIENT_ID,
            client_secret=(
                client_secret if client_secret is not None else settings.GOOGLE_CLIENT_SECRET.get_secret_value()
            ),
            redirect_uri=redirect_uri or settings.GOOGLE_REDIRECT_URI,
            scopes=scopes or settings.GOOGLE_SCOPES,
            timeout=timeout,
        )

    def _authorization_params(self, state: Optional[str]) -> Dict[str, str]:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return params

    async def exchange_code(self, code: str) -> ProviderTokens:
        """Exchanges an authorization code at Google's token endpoint (POST).

        Raises:
            OAuthExchangeFailedError: If Google rejects the code or cannot be reached.
        """
        try:
            async with self._session() as client:
                token = await client.fetch_token(self.TOKEN_URL, code=code)
            return ProviderTokens.from_token_response(token)
        except PROVIDER_ERRORS as e:
            self._log_failure("exchange_code", e)
            raise OAuthExchangeFailedError(self.provider.value, detail=str(e)) from e

    async def refresh_access_token(self, refresh_token: str) -> ProviderTokens:
        """Obtains a new Google access token from a stored refresh token.

        Raises:
            OAuthExchangeFailedError: If the refresh token was revoked or Google cannot be reached.
        """
        try:
            async with self._session() as client:
                token = await client.refresh_token(self.TOKEN_URL, refresh_token=refresh_token)
            return ProviderTokens.from_token_response(token)
        except PROVIDER_ERRORS as e:
            self._log_failure("refresh_access_token", e)
            raise OAuthExchangeFailedError(self.provider.value, detail=str(e)) from e

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Reads the user's profile from the userinfo endpoint (Bearer auth).

        Raises:
            OAuthProfileFetchFailedError: If the profile cannot be retrieved.
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            async with self._session() as client:
                response = await client.request(
                    "GET", self.USERINFO_URL, headers=headers, withhold_token=True
                )
                response.raise_for_status()
                data = response.json()
            return ProviderProfile(
                id=str(data["id"]),
                email=data.get("email"),
                name=data.get("name"),
                given_name=data.get("given_name"),
                family_name=data.get("family_name"),
                picture=data.get("picture"),
            )
        except PROVIDER_ERRORS as e:
            self._log_failure("fetch_profile", e)
            raise OAuthProfileFetchFailedError(self.provider.value, detail=str(e)) from e
