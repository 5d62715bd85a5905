from dataclasses import dataclass
from typing import Optional

from structlog import get_logger

from chatauth.core.exceptions import (
    AccountDisabledError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    UniqueConstraintViolation,
    UserAlreadyExistsError,
    UsernameTakenError,
)
from chatauth.domain.entities.device import DeviceType
from chatauth.domain.entities.user import User, UserStatus
from chatauth.domain.interfaces.repositories import IUserRepository
from chatauth.domain.services.auth.token import TokenService
from chatauth.domain.value_objects.token import TokenPair, TokenType
from chatauth.utils.masking import mask_email, mask_username
from chatauth.utils.security import DUMMY_PASSWORD_HASH, hash_password, verify_password

logger = get_logger(__name__)


@dataclass
class AuthResult:
    user: User
    tokens: TokenPair


class UserAuthenticationService:
    """
    Service for email/password authentication and the token lifecycle.

    Covers registration, credential login, refresh token rotation, logout and
    resolving the user behind an access token. Persistence goes through
    `IUserRepository`; tokens come from `TokenService`.

    Attributes:
        user_repository (IUserRepository): Store of the user aggregate.
        token_service (TokenService): Issues and verifies JWTs.
    """

    def __init__(self, user_repository: IUserRepository, token_service: TokenService):
        self.user_repository = user_repository
        self.token_service = token_service

    async def register(
        self,
        email: str,
        password: str,
        display_name: str,
        username: Optional[str] = None,
        phone_number: Optional[str] = None,
        bio: Optional[str] = None,
        device_token: Optional[str] = None,
        device_type: Optional[DeviceType | str] = None,
        device_name: Optional[str] = None,
    ) -> AuthResult:
        """
        Register a new account and sign it in.

        Args:
            email (str): Email address, compared case-insensitively.
            password (str): Plain password, stored as a bcrypt hash.
            display_name (str): Name shown to other users.
            username (str, optional): Unique handle.
            device_token (str, optional): Push token of the registering device.

        Returns:
            AuthResult: The new user and a token pair.

        Raises:
            UserAlreadyExistsError: If the email is taken.
            UsernameTakenError: If the username is taken.
        """
        email = email.strip().lower()
        username = username.strip() if username else None

        if not await self.user_repository.is_email_available(email):
            logger.info("Registration with existing email", email=mask_email(email))
            raise UserAlreadyExistsError()
        if username and not await self.user_repository.is_username_available(username):
            logger.info("Registration with taken username", username=mask_username(username))
            raise UsernameTakenError()

        user = User(
            email=email,
            username=username,
            display_name=display_name.strip(),
            hashed_password=hash_password(password),
            phone_number=phone_number,
            bio=bio,
            is_verified=False,
            status=UserStatus.ONLINE,
        )
        if device_token:
            user.upsert_device(device_token, device_type, device_name)
        user.mark_authenticated()

        try:
            user = await self.user_repository.create(user)
        except UniqueConstraintViolation as e:
            if e.field == "username":
                raise UsernameTakenError() from e
            raise UserAlreadyExistsError() from e

        logger.info("New user registered", user_id=str(user.id), email=mask_email(email))
        return AuthResult(user=user, tokens=self.token_service.issue(user.id))

    async def login(
        self,
        email: str,
        password: str,
        device_token: Optional[str] = None,
        device_type: Optional[DeviceType | str] = None,
        device_name: Optional[str] = None,
    ) -> AuthResult:
        """
        Authenticate with email and password.

        An unknown email still costs one bcrypt verification, so response
        timing does not reveal whether an account exists.

        Returns:
            AuthResult: The user and a token pair.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong.
            AccountDisabledError: If the account is inactive.
        """
        email = email.strip().lower()
        user = await self.user_repository.get_by_email(email, include_password=True)

        if user is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.warning("Login attempt for unknown email", email=mask_email(email))
            raise InvalidCredentialsError()

        if not verify_password(password, user.hashed_password):
            logger.warning("Invalid password", user_id=str(user.id))
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning("Authentication attempt for inactive user", user_id=str(user.id))
            raise AccountDisabledError()

        if device_token:
            user.upsert_device(device_token, device_type, device_name)
        user.mark_authenticated()
        try:
            user = await self.user_repository.save(user)
        except UniqueConstraintViolation as e:
            if e.field != "device_token":
                raise
            # Another login registered the same device first; update its row instead.
            logger.info("Device registered concurrently, updating it", user_id=str(user.id))
            user = await self.user_repository.get_by_email(email, include_password=True)
            if user is None:
                raise
            user.upsert_device(device_token, device_type, device_name)
            user.mark_authenticated()
            user = await self.user_repository.save(user)

        logger.info("User logged in", user_id=str(user.id))
        return AuthResult(user=user, tokens=self.token_service.issue(user.id))

    async def refresh(self, refresh_token: str) -> AuthResult:
        """
        Exchange a refresh token for a new token pair.

        Both tokens are rotated.

        Raises:
            WrongTokenTypeError: If an access token is presented.
            InvalidRefreshTokenError: If the token is invalid or expired, or the
                user no longer exists or is inactive.
        """
        try:
            claims = self.token_service.verify(refresh_token, TokenType.REFRESH)
        except InvalidTokenError as e:
            raise InvalidRefreshTokenError() from e

        user = await self.user_repository.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            logger.warning("Refresh for missing or inactive user", user_id=str(claims.user_id))
            raise InvalidRefreshTokenError()

        logger.info("Tokens refreshed", user_id=str(user.id))
        return AuthResult(user=user, tokens=self.token_service.issue(user.id))

    async def logout(self, user: User, device_token: Optional[str] = None) -> None:
        """
        Sign the user out on one device.

        Removes exactly the device registered under ``device_token`` when it
        is given. Unknown tokens are ignored, so logout always succeeds.
        """
        if device_token and user.remove_device(device_token):
            await self.user_repository.save(user)
            logger.info("Device removed on logout", user_id=str(user.id))
        logger.info("User logged out", user_id=str(user.id))

    async def get_current_user(self, access_token: str) -> User:
        """
        Resolve the user behind an access token.

        Raises:
            InvalidTokenError: If the token is invalid or expired, or the user
                no longer exists or is inactive.
            WrongTokenTypeError: If a refresh token is presented.
        """
        claims = self.token_service.verify(access_token, TokenType.ACCESS)
        user = await self.user_repository.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            logger.warning("Access token for missing or inactive user", user_id=str(claims.user_id))
            raise InvalidTokenError("User not found or inactive")
        return user
