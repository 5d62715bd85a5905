"""Identity reconciliation for federated logins.

Maps a provider profile onto a local account. The rules, in order:

1. An account already linked to ``(provider, profile.id)`` wins; its provider
   entry is refreshed in place.
2. Otherwise an account with the same (lowercased) email gets a new provider
   entry appended.
3. Otherwise a verified account is created, with a username derived from the
   email local part or display name and made unique with a numeric suffix.

The unique indexes of the store have the last word: a concurrent username
collision moves on to the next candidate, a concurrent email collision links
to the account that won the race, and a concurrent claim of the same provider
identity logs in to the account it was linked to.
"""

from dataclasses import dataclass
from datetime import datetime
import re
from typing import Optional, Tuple

from structlog import get_logger

from chatauth.core.config.settings import settings
from chatauth.core.exceptions import (
    AccountDisabledError,
    EmailRequiredFromProviderError,
    UniqueConstraintViolation,
    UsernameGenerationExhaustedError,
)
from chatauth.domain.entities.auth_provider import AuthProvider, Provider
from chatauth.domain.entities.user import User, UserStatus
from chatauth.domain.interfaces.oauth import ITokenEncryptionService
from chatauth.domain.interfaces.repositories import IUserRepository
from chatauth.domain.services.auth.token import TokenService
from chatauth.domain.value_objects.oauth import ProviderProfile, ProviderTokens
from chatauth.domain.value_objects.token import TokenPair
from chatauth.utils.clock import utc_now
from chatauth.utils.masking import mask_email, mask_username
from chatauth.utils.security import hash_unusable_password

logger = get_logger(__name__)

USERNAME_MAX_LENGTH = 50
_USERNAME_DISALLOWED = re.compile(r"[^a-z0-9_.-]")


@dataclass
class ReconciliationResult:
    user: User
    tokens: TokenPair
    is_new_user: bool


def username_base(email: Optional[str], display_name: Optional[str]) -> str:
    """Derives the username stem for an account created from a provider profile.

    Both sources are lowercased and reduced to ``[a-z0-9_.-]``. The email
    local part is preferred; the display name is used when nothing of the
    local part survives, and ``user`` when neither yields anything.
    """
    local_part = email.split("@", 1)[0] if email else ""
    base = _USERNAME_DISALLOWED.sub("", local_part.lower())
    if not base:
        base = _USERNAME_DISALLOWED.sub("", (display_name or "").lower())
    return base or "user"


class IdentityReconciliationService:
    """Turns a verified provider identity into a local user and a token pair."""

    def __init__(
        self,
        user_repository: IUserRepository,
        token_service: TokenService,
        token_encryption: ITokenEncryptionService,
        max_username_attempts: Optional[int] = None,
    ):
        self.user_repository = user_repository
        self.token_service = token_service
        self.token_encryption = token_encryption
        self.max_username_attempts = max_username_attempts or settings.USERNAME_MAX_ATTEMPTS

    async def reconcile(
        self,
        profile: ProviderProfile,
        provider: Provider | str,
        provider_tokens: ProviderTokens,
    ) -> ReconciliationResult:
        """Finds, links or creates the account behind a provider identity.

        Args:
            profile: Identity reported by the provider.
            provider: The provider the identity belongs to.
            provider_tokens: Tokens obtained from the provider.

        Returns:
            ReconciliationResult: The user, a fresh token pair, and whether the
            account was created by this call.

        Raises:
            EmailRequiredFromProviderError: If the identity is unknown and the
                provider did not share an email address.
            AccountDisabledError: If the matched account is inactive.
            UsernameGenerationExhaustedError: If no free username was found.
        """
        provider = Provider(provider)
        now = utc_now()
        is_new_user = False

        user = await self.user_repository.get_by_provider_identity(provider, profile.id)
        if user is not None:
            user = await self._login_linked(user, profile, provider, provider_tokens, now)
        else:
            if not profile.email:
                raise EmailRequiredFromProviderError(provider.value, detail="profile has no email")
            email = profile.email.strip().lower()

            user = await self.user_repository.get_by_email(email)
            if user is not None:
                user = await self._link(user, profile, provider, provider_tokens, now)
            else:
                user, is_new_user = await self._create(email, profile, provider, provider_tokens, now)

        tokens = self.token_service.issue(user.id)
        return ReconciliationResult(user=user, tokens=tokens, is_new_user=is_new_user)

    async def _login_linked(
        self,
        user: User,
        profile: ProviderProfile,
        provider: Provider,
        provider_tokens: ProviderTokens,
        now: datetime,
    ) -> User:
        self._ensure_active(user, provider)
        entry = user.find_provider(provider, profile.id)
        self._refresh_entry(entry, profile, provider_tokens, now)
        logger.info("OAuth login for linked identity", provider=provider.value, user_id=str(user.id))
        user.mark_authenticated()
        return await self.user_repository.save(user)

    async def _find_concurrent_link(self, profile: ProviderProfile, provider: Provider) -> Optional[User]:
        """Looks up the account another request linked ``profile`` to first."""
        winner = await self.user_repository.get_by_provider_identity(provider, profile.id)
        if winner is not None:
            logger.info(
                "Identity linked concurrently, logging in to it",
                provider=provider.value,
                user_id=str(winner.id),
            )
        return winner

    async def _link(
        self,
        user: User,
        profile: ProviderProfile,
        provider: Provider,
        provider_tokens: ProviderTokens,
        now: datetime,
    ) -> User:
        self._ensure_active(user, provider)
        entry = user.find_provider(provider, profile.id)
        if entry is not None:
            self._refresh_entry(entry, profile, provider_tokens, now)
        else:
            user.providers.append(self._new_entry(profile, provider, provider_tokens, now))
        logger.info(
            "Linked OAuth identity to existing account",
            provider=provider.value,
            user_id=str(user.id),
            email=mask_email(user.email),
        )
        user.mark_authenticated()
        try:
            return await self.user_repository.save(user)
        except UniqueConstraintViolation as e:
            if e.field != "provider_identity":
                raise
            winner = await self._find_concurrent_link(profile, provider)
            if winner is None:
                raise
        return await self._login_linked(winner, profile, provider, provider_tokens, now)

    async def _create(
        self,
        email: str,
        profile: ProviderProfile,
        provider: Provider,
        provider_tokens: ProviderTokens,
        now: datetime,
    ) -> Tuple[User, bool]:
        base = username_base(email, profile.name)
        suffix_room = len(str(self.max_username_attempts))
        base = base[: USERNAME_MAX_LENGTH - suffix_room]
        unusable_password = hash_unusable_password()

        for index in range(self.max_username_attempts):
            candidate = base if index == 0 else f"{base}{index}"
            if not await self.user_repository.is_username_available(candidate):
                continue

            user = User(
                email=email,
                username=candidate,
                display_name=profile.display_name[:100],
                hashed_password=unusable_password,
                avatar_url=profile.picture,
                is_verified=True,
                status=UserStatus.ONLINE,
                last_seen=now,
                created_at=now,
                updated_at=now,
            )
            user.providers.append(self._new_entry(profile, provider, provider_tokens, now))
            try:
                created = await self.user_repository.create(user)
            except UniqueConstraintViolation as e:
                if e.field == "username":
                    logger.info("Username taken concurrently, trying next candidate", username=mask_username(candidate))
                    continue
                if e.field == "email":
                    winner = await self.user_repository.get_by_email(email)
                    if winner is None:
                        raise
                    logger.info("Account created concurrently, linking to it", email=mask_email(email))
                    return await self._link(winner, profile, provider, provider_tokens, now), False
                if e.field == "provider_identity":
                    winner = await self._find_concurrent_link(profile, provider)
                    if winner is None:
                        raise
                    return await self._login_linked(winner, profile, provider, provider_tokens, now), False
                raise

            logger.info(
                "Created account from OAuth identity",
                provider=provider.value,
                user_id=str(created.id),
                username=mask_username(candidate),
            )
            return created, True

        raise UsernameGenerationExhaustedError(base, self.max_username_attempts)

    def _new_entry(
        self,
        profile: ProviderProfile,
        provider: Provider,
        provider_tokens: ProviderTokens,
        now: datetime,
    ) -> AuthProvider:
        return AuthProvider(
            provider=provider,
            provider_id=profile.id,
            provider_email=profile.email.strip().lower() if profile.email else None,
            access_token=self.token_encryption.encrypt(provider_tokens.access_token),
            refresh_token=self.token_encryption.encrypt(provider_tokens.refresh_token),
            expires_at=provider_tokens.expires_at,
            created_at=now,
            updated_at=now,
        )

    def _refresh_entry(
        self,
        entry: AuthProvider,
        profile: ProviderProfile,
        provider_tokens: ProviderTokens,
        now: datetime,
    ) -> None:
        if profile.email:
            entry.provider_email = profile.email.strip().lower()
        entry.access_token = self.token_encryption.encrypt(provider_tokens.access_token)
        if provider_tokens.refresh_token is not None:
            entry.refresh_token = self.token_encryption.encrypt(provider_tokens.refresh_token)
        entry.expires_at = provider_tokens.expires_at
        entry.updated_at = now

    @staticmethod
    def _ensure_active(user: User, provider: Provider) -> None:
        if not user.is_active:
            logger.warning("OAuth login for disabled account", provider=provider.value, user_id=str(user.id))
            raise AccountDisabledError()
