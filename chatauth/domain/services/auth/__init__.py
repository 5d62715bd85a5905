from chatauth.domain.services.auth.identity_reconciliation import (
    IdentityReconciliationService,
    ReconciliationResult,
)
from chatauth.domain.services.auth.oauth import OAuthService
from chatauth.domain.services.auth.token import TokenService
from chatauth.domain.services.auth.user_authentication import AuthResult, UserAuthenticationService

__all__ = [
    "AuthResult",
    "IdentityReconciliationService",
    "OAuthService",
    "ReconciliationResult",
    "TokenService",
    "UserAuthenticationService",
]
