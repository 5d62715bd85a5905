"""Dependency injection for the authentication services.

Each factory builds one collaborator from the ones below it, so FastAPI
resolves the whole graph per request from a single database session:

    get_db -> get_user_repository -> UserAuthenticationService
                                  -> IdentityReconciliationService -> OAuthService

Stateless collaborators (token service, token encryption, provider clients)
are created once per process. Tests swap any of them through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated, Dict

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.interfaces.oauth import IOAuthProviderClient, ITokenEncryptionService
from chatauth.domain.interfaces.repositories import IUserRepository
from chatauth.domain.services.auth.identity_reconciliation import IdentityReconciliationService
from chatauth.domain.services.auth.oauth import OAuthService
from chatauth.domain.services.auth.token import TokenService
from chatauth.domain.services.auth.user_authentication import UserAuthenticationService
from chatauth.infrastructure.database.async_db import get_db
from chatauth.infrastructure.repositories.user_repository import UserRepository
from chatauth.infrastructure.services.authentication.token_encryption import FernetTokenEncryptionService
from chatauth.infrastructure.services.oauth.facebook import FacebookOAuthClient
from chatauth.infrastructure.services.oauth.google import GoogleOAuthClient

# ---------------------------------------------------------------------------
# Type aliases for dependency injection
# ---------------------------------------------------------------------------

AsyncDB = Annotated[AsyncSession, Depends(get_db)]

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------


def get_user_repository(db: AsyncDB) -> IUserRepository:
    """Factory that returns the user repository bound to the request session.

    Args:
        db: Database session dependency from FastAPI

    Returns:
        IUserRepository: SQLAlchemy user repository
    """
    return UserRepository(db)


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token service configured from settings."""
    return TokenService()


@lru_cache
def get_token_encryption_service() -> ITokenEncryptionService:
    """Process-wide Fernet cipher for provider tokens."""
    return FernetTokenEncryptionService()


@lru_cache
def get_oauth_clients() -> Dict[Provider, IOAuthProviderClient]:
    """Process-wide exchange clients keyed by provider. Clients are stateless."""
    return {
        Provider.GOOGLE: GoogleOAuthClient(),
        Provider.FACEBOOK: FacebookOAuthClient(),
    }


UserRepositoryDep = Annotated[IUserRepository, Depends(get_user_repository)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
TokenEncryptionDep = Annotated[ITokenEncryptionService, Depends(get_token_encryption_service)]
OAuthClientsDep = Annotated[Dict[Provider, IOAuthProviderClient], Depends(get_oauth_clients)]

# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def get_user_authentication_service(
    user_repository: UserRepositoryDep,
    token_service: TokenServiceDep,
) -> UserAuthenticationService:
    """Factory for the register/login/refresh/logout service."""
    return UserAuthenticationService(user_repository, token_service)


def get_identity_reconciliation_service(
    user_repository: UserRepositoryDep,
    token_service: TokenServiceDep,
    token_encryption: TokenEncryptionDep,
) -> IdentityReconciliationService:
    """Factory for the account linking engine."""
    return IdentityReconciliationService(user_repository, token_service, token_encryption)


def get_oauth_service(
    clients: OAuthClientsDep,
    reconciliation: Annotated[IdentityReconciliationService, Depends(get_identity_reconciliation_service)],
) -> OAuthService:
    """Factory for the OAuth flow orchestrator."""
    return OAuthService(clients, reconciliation)


UserAuthenticationServiceDep = Annotated[UserAuthenticationService, Depends(get_user_authentication_service)]
OAuthServiceDep = Annotated[OAuthService, Depends(get_oauth_service)]
