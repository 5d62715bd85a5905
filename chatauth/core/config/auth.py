"""Authentication settings: JWT signing, password hashing and provider token encryption.
"""

import logging

from cryptography.fernet import Fernet
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Defines settings for token issuance and credential storage.

    Access and refresh tokens are signed with two different HMAC secrets so that
    a leaked refresh secret cannot be used to forge access tokens and vice versa.

    Security Note:
        - JWT secrets must be random, at least 32 characters, and rotated regularly.
        - TOKEN_ENCRYPTION_KEY protects OAuth provider tokens at rest; losing it
          makes stored provider tokens unreadable.
    """

    # JWT settings
    JWT_ACCESS_SECRET: SecretStr
    JWT_REFRESH_SECRET: SecretStr
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "chatauth"
    JWT_AUDIENCE: str = "chatauth:api:v1"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(ge=1, default=15)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(ge=1, default=7)

    # Cookies carrying tokens after an OAuth callback
    AUTH_COOKIE_SECURE: bool = True
    AUTH_COOKIE_SAMESITE: str = "lax"

    # Password hashing
    BCRYPT_ROUNDS: int = Field(ge=4, le=31, default=12)

    # Fernet key used for provider access/refresh tokens stored in auth_providers
    TOKEN_ENCRYPTION_KEY: SecretStr = SecretStr("")

    # Upper bound for the username candidates tried when creating OAuth accounts
    USERNAME_MAX_ATTEMPTS: int = Field(ge=1, default=1000)

    @model_validator(mode="after")
    def _validate_secrets(self) -> "AuthSettings":
        """Rejects identical signing secrets and fills in a development encryption key.

        Returns:
            Self instance with validated secrets.
        """
        access_secret = self.JWT_ACCESS_SECRET.get_secret_value()
        refresh_secret = self.JWT_REFRESH_SECRET.get_secret_value()
        if len(access_secret) < 32 or len(refresh_secret) < 32:
            error_msg = "JWT secrets must be at least 32 characters long."
            logger.error(error_msg)
            raise ValueError(error_msg)

        if access_secret == refresh_secret:
            error_msg = "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be different."
            logger.error(error_msg)
            raise ValueError(error_msg)

        if not self.TOKEN_ENCRYPTION_KEY.get_secret_value():
            if getattr(self, "APP_ENV", "development") in ("staging", "production"):
                raise ValueError("TOKEN_ENCRYPTION_KEY is required outside development.")
            logger.warning(
                "TOKEN_ENCRYPTION_KEY not set, generating an ephemeral key. "
                "Stored provider tokens will not survive a restart."
            )
            self.TOKEN_ENCRYPTION_KEY = SecretStr(Fernet.generate_key().decode())

        return self
