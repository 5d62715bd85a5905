from unittest.mock import AsyncMock, MagicMock

import pytest

from chatauth.core.exceptions import OAuthCallbackError, OAuthExchangeFailedError
from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.interfaces.oauth import IOAuthProviderClient
from chatauth.domain.services.auth.identity_reconciliation import IdentityReconciliationService
from chatauth.domain.services.auth.oauth import OAuthService
from tests.factories import create_fake_profile, create_fake_provider_tokens


def _client(provider: Provider):
    client = AsyncMock(spec=IOAuthProviderClient)
    client.provider = provider
    client.build_authorization_url = MagicMock(return_value=f"https://{provider.value}.example/consent")
    client.exchange_code.return_value = create_fake_provider_tokens(access_token=f"{provider.value}-short")
    client.fetch_profile.return_value = create_fake_profile()
    return client


@pytest.fixture
def google_client():
    return _client(Provider.GOOGLE)


@pytest.fixture
def facebook_client():
    client = _client(Provider.FACEBOOK)
    client.upgrade_to_long_lived_token = AsyncMock(
        return_value=create_fake_provider_tokens(access_token="facebook-long")
    )
    return client


@pytest.fixture
def reconciliation():
    service = AsyncMock(spec=IdentityReconciliationService)
    service.reconcile.return_value = MagicMock(user=MagicMock(id="user-id"), is_new_user=True)
    return service


@pytest.fixture
def oauth_service(google_client, facebook_client, reconciliation):
    return OAuthService(
        {Provider.GOOGLE: google_client, Provider.FACEBOOK: facebook_client},
        reconciliation,
        facebook_long_lived_token=True,
    )


def test_authorization_url_delegates_to_client(oauth_service, google_client):
    url = oauth_service.authorization_url("google", state="xyz")

    assert url == "https://google.example/consent"
    google_client.build_authorization_url.assert_called_once_with(state="xyz")


@pytest.mark.asyncio
async def test_google_callback_exchanges_fetches_and_reconciles(oauth_service, google_client, reconciliation):
    result = await oauth_service.handle_callback("google", code="auth-code")

    google_client.exchange_code.assert_awaited_once_with("auth-code")
    google_client.fetch_profile.assert_awaited_once_with("google-short")
    reconciliation.reconcile.assert_awaited_once_with(
        google_client.fetch_profile.return_value, Provider.GOOGLE, google_client.exchange_code.return_value
    )
    assert result is reconciliation.reconcile.return_value


@pytest.mark.asyncio
async def test_facebook_callback_upgrades_to_long_lived_token(oauth_service, facebook_client, reconciliation):
    await oauth_service.handle_callback(Provider.FACEBOOK, code="fb-code")

    facebook_client.upgrade_to_long_lived_token.assert_awaited_once_with("facebook-short")
    facebook_client.fetch_profile.assert_awaited_once_with("facebook-long")
    _, _, provider_tokens = reconciliation.reconcile.await_args.args
    assert provider_tokens.access_token == "facebook-long"


@pytest.mark.asyncio
async def test_facebook_upgrade_can_be_disabled(google_client, facebook_client, reconciliation):
    service = OAuthService(
        {Provider.GOOGLE: google_client, Provider.FACEBOOK: facebook_client},
        reconciliation,
        facebook_long_lived_token=False,
    )

    await service.handle_callback(Provider.FACEBOOK, code="fb-code")

    facebook_client.upgrade_to_long_lived_token.assert_not_awaited()
    facebook_client.fetch_profile.assert_awaited_once_with("facebook-short")


@pytest.mark.asyncio
async def test_provider_error_stops_before_exchange(oauth_service, google_client):
    with pytest.raises(OAuthCallbackError) as exc_info:
        await oauth_service.handle_callback(
            "google", error="access_denied", error_description="The user denied access"
        )

    assert exc_info.value.provider == "google"
    assert exc_info.value.detail == "The user denied access"
    assert "access_denied" in exc_info.value.message
    google_client.exchange_code.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_code_is_a_callback_error(oauth_service, google_client):
    with pytest.raises(OAuthCallbackError):
        await oauth_service.handle_callback("google")

    google_client.exchange_code.assert_not_awaited()


@pytest.mark.asyncio
async def test_exchange_failure_propagates_without_retry(oauth_service, google_client, reconciliation):
    google_client.exchange_code.side_effect = OAuthExchangeFailedError("google", detail="invalid_grant")

    with pytest.raises(OAuthExchangeFailedError):
        await oauth_service.handle_callback("google", code="stale")

    assert google_client.exchange_code.await_count == 1
    google_client.fetch_profile.assert_not_awaited()
    reconciliation.reconcile.assert_not_awaited()


def test_unknown_provider_is_rejected(oauth_service):
    with pytest.raises(ValueError):
        oauth_service.client_for("twitter")
