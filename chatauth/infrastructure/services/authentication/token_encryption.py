"""Encryption-at-rest for OAuth provider tokens.

Provider access and refresh tokens grant access to the user's account at the
provider, so they are Fernet-encrypted (AES-128-CBC + HMAC-SHA256) before
they reach the ``auth_providers`` table.
"""

from typing import Optional

import structlog
from cryptography.fernet import Fernet, InvalidToken

from chatauth.core.config.settings import settings
from chatauth.core.exceptions import DecryptionError, EncryptionError
from chatauth.domain.interfaces.oauth import ITokenEncryptionService

logger = structlog.get_logger(__name__)


class FernetTokenEncryptionService(ITokenEncryptionService):
    """Fernet implementation of `ITokenEncryptionService`.

    ``None`` passes through unchanged in both directions, since providers do
    not always issue refresh tokens.
    """

    def __init__(self, encryption_key: Optional[str] = None):
        """Initialize the service.

        Args:
            encryption_key: Fernet key; defaults to ``settings.TOKEN_ENCRYPTION_KEY``.

        Raises:
            ValueError: If the key is not a valid Fernet key.
        """
        key = encryption_key or settings.TOKEN_ENCRYPTION_KEY.get_secret_value()
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)
        self._logger = logger.bind(service="FernetTokenEncryptionService")

    def encrypt(self, value: Optional[str]) -> Optional[bytes]:
        if value is None:
            return None
        try:
            return self._fernet.encrypt(value.encode("utf-8"))
        except (TypeError, ValueError) as e:
            self._logger.error("Provider token encryption failed", error_type=type(e).__name__)
            raise EncryptionError() from e

    def decrypt(self, value: Optional[bytes]) -> Optional[str]:
        if value is None:
            return None
        try:
            return self._fernet.decrypt(value).decode("utf-8")
        except (InvalidToken, TypeError, UnicodeDecodeError) as e:
            self._logger.error("Provider token decryption failed", error_type=type(e).__name__)
            raise DecryptionError() from e
