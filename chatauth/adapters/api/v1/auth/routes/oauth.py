"""OAuth endpoints for Google and Facebook.

``GET /auth/{provider}`` redirects the browser to the provider's consent page.
``GET /auth/{provider}/callback`` completes the login: tokens are set as
HttpOnly cookies and the browser is sent back to the client application with
``auth=success`` and the ``newUser`` flag. Tokens never appear in URLs.
Failures are reported as JSON errors by the registered exception handlers.
"""

from typing import Annotated, Optional
from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Query, status
from fastapi.responses import RedirectResponse

from chatauth.adapters.api.v1.auth.utils import set_auth_cookies
from chatauth.core.config.settings import settings
from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.services.auth.identity_reconciliation import ReconciliationResult
from chatauth.infrastructure.dependency_injection.auth_dependencies import OAuthServiceDep

logger = structlog.get_logger(__name__)
router = APIRouter()

StateParam = Annotated[Optional[str], Query(max_length=512, description="Opaque value echoed back to the client")]


def _client_redirect(result: ReconciliationResult, state: Optional[str]) -> RedirectResponse:
    params = {"auth": "success", "newUser": "true" if result.is_new_user else "false"}
    if state:
        params["state"] = state
    separator = "&" if "?" in settings.CLIENT_URL else "?"
    response = RedirectResponse(
        f"{settings.CLIENT_URL}{separator}{urlencode(params)}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    set_auth_cookies(response, result.tokens)
    return response


async def _complete(
    oauth_service,
    provider: Provider,
    code: Optional[str],
    error: Optional[str],
    error_description: Optional[str],
    state: Optional[str],
) -> RedirectResponse:
    result = await oauth_service.handle_callback(
        provider, code=code, error=error, error_description=error_description
    )
    return _client_redirect(result, state)


def _consent_redirect(oauth_service, provider: Provider, state: Optional[str]) -> RedirectResponse:
    url = oauth_service.authorization_url(provider, state=state)
    logger.debug("Redirecting to OAuth consent page", provider=provider.value)
    return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/google", summary="Start Google login", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def google_login(oauth_service: OAuthServiceDep, state: StateParam = None) -> RedirectResponse:
    return _consent_redirect(oauth_service, Provider.GOOGLE, state)


@router.get("/google/callback", summary="Complete Google login", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def google_callback(
    oauth_service: OAuthServiceDep,
    code: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
    state: StateParam = None,
) -> RedirectResponse:
    return await _complete(oauth_service, Provider.GOOGLE, code, error, error_description, state)


@router.get("/facebook", summary="Start Facebook login", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def facebook_login(oauth_service: OAuthServiceDep, state: StateParam = None) -> RedirectResponse:
    return _consent_redirect(oauth_service, Provider.FACEBOOK, state)


@router.get("/facebook/callback", summary="Complete Facebook login", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def facebook_callback(
    oauth_service: OAuthServiceDep,
    code: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
    state: StateParam = None,
) -> RedirectResponse:
    return await _complete(oauth_service, Provider.FACEBOOK, code, error, error_description, state)
