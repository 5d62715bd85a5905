"""Shared plumbing for the OAuth exchange clients.

Each client talks to its provider through authlib's `AsyncOAuth2Client`, an
``httpx.AsyncClient`` that knows how to run OAuth 2.0 token requests. A fresh
session is opened per call, so clients keep no state between calls.
"""

from typing import Dict, Iterable, Optional

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from structlog import get_logger

from chatauth.core.config.settings import settings
from chatauth.domain.interfaces.oauth import IOAuthProviderClient

logger = get_logger(__name__)

# Failures of a single provider round trip: OAuth error payloads, transport
# errors and non-2xx statuses, and responses missing the expected fields.
PROVIDER_ERRORS = (AuthlibBaseError, httpx.HTTPError, ValueError, KeyError, TypeError)


class BaseOAuthProviderClient(IOAuthProviderClient):
    """Common configuration for the provider clients.

    Attributes:
        client_id (str): OAuth client identifier registered with the provider.
        redirect_uri (str): Callback URL registered with the provider.
        scopes (list[str]): Requested scopes.
        timeout (float): Per-request timeout in seconds. Requests are never retried.
    """

    AUTHORIZATION_URL: str
    TOKEN_URL: str

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: Iterable[str],
        timeout: Optional[float] = None,
    ):
        self.client_id = client_id
        self._client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self.timeout = timeout or settings.OAUTH_HTTP_TIMEOUT

    def _session(self) -> AsyncOAuth2Client:
        """Opens a new provider session. Calls without an OAuth token pass ``withhold_token=True``."""
        return AsyncOAuth2Client(
            client_id=self.client_id,
            client_secret=self._client_secret,
            redirect_uri=self.redirect_uri,
            scope=" ".join(self.scopes),
            token_endpoint_auth_method="client_secret_post",
            timeout=self.timeout,
        )

    def _authorization_params(self, state: Optional[str]) -> Dict[str, str]:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
        }
        if state:
            params["state"] = state
        return params

    def build_authorization_url(self, state: Optional[str] = None) -> str:
        """Returns the consent URL; identical inputs always give the identical URL."""
        return str(httpx.URL(self.AUTHORIZATION_URL, params=self._authorization_params(state)))

    def _log_failure(self, operation: str, error: Exception) -> None:
        logger.warning(
            "OAuth provider call failed",
            provider=self.provider.value,
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
        )
