"""Centralized, structured exception hierarchy for chatauth.

Every error raised by the domain carries a machine-readable `code` for
programmatic handling and a human-readable `message` for logging and user
feedback. The API layer maps each family to one HTTP status in
`chatauth.core.handlers`.
"""

from __future__ import annotations

from typing import Final

__all__: Final = [
    "ChatAuthError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "WrongTokenTypeError",
    "InvalidRefreshTokenError",
    "AccountDisabledError",
    "UserAlreadyExistsError",
    "UsernameTakenError",
    "UniqueConstraintViolation",
    "OAuthError",
    "OAuthCallbackError",
    "EmailRequiredFromProviderError",
    "OAuthExchangeFailedError",
    "OAuthProfileFetchFailedError",
    "UsernameGenerationExhaustedError",
    "DatabaseError",
    "EncryptionError",
    "DecryptionError",
]


class ChatAuthError(Exception):
    """Base exception class for all custom errors in the application.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    # A concise, structured representation used by loggers & FastAPI handlers.
    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Auth-related errors (401 Unauthorized)
# ---------------------------------------------------------------------------


class AuthenticationError(ChatAuthError):
    """Raised for general authentication failures.

    This exception is the base for more specific authentication-related
    errors. It maps to a `401 Unauthorized` HTTP status code.
    """

    def __init__(self, message: str = "Authentication required", code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match.

    The message is identical whether the email is unknown or the password is
    wrong, so the response cannot be used to enumerate accounts.
    """

    def __init__(self, message: str = "Invalid email or password", code: str = "invalid_credentials"):
        super().__init__(message, code)


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT has a bad signature, is malformed, expired or lacks claims."""

    def __init__(self, message: str = "Invalid or expired token", code: str = "invalid_token"):
        super().__init__(message, code)


class WrongTokenTypeError(AuthenticationError):
    """Raised when a valid token of one type is presented where the other is expected."""

    def __init__(self, message: str = "Invalid token type", code: str = "invalid_token_type"):
        super().__init__(message, code)


class InvalidRefreshTokenError(InvalidTokenError):
    """Raised when a refresh token cannot be exchanged for a new token pair."""

    def __init__(self, message: str = "Invalid or expired refresh token", code: str = "invalid_refresh_token"):
        super().__init__(message, code)


class AccountDisabledError(ChatAuthError):
    """Raised when an inactive account attempts to authenticate.

    The user is known but not allowed in, so it maps to `403 Forbidden`.
    """

    def __init__(self, message: str = "Account is disabled", code: str = "account_disabled"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Conflict errors (409 Conflict)
# ---------------------------------------------------------------------------


class UserAlreadyExistsError(ChatAuthError):
    """Raised when registering an email that already belongs to an account."""

    def __init__(self, message: str = "User with this email already exists", code: str = "user_exists"):
        super().__init__(message, code)


class UsernameTakenError(ChatAuthError):
    """Raised when registering a username that already belongs to an account."""

    def __init__(self, message: str = "Username already taken", code: str = "username_taken"):
        super().__init__(message, code)


class UniqueConstraintViolation(ChatAuthError):
    """Raised by the repository when a storage unique index rejects a write.

    Attributes:
        field (str | None): The index that collided (``email``, ``username``,
            ``provider_identity`` or ``device_token``), or None when it could
            not be determined.
    """

    def __init__(self, field: str | None = None, message: str | None = None, code: str = "unique_violation"):
        self.field = field
        super().__init__(message or f"Unique constraint violated on {field or 'unknown field'}", code)


# ---------------------------------------------------------------------------
# OAuth errors
# ---------------------------------------------------------------------------


class OAuthError(ChatAuthError):
    """Base class for federated login failures.

    Attributes:
        provider (str): Provider the failure relates to.
        detail (str | None): Provider diagnostic, logged but never returned to clients.
    """

    def __init__(self, provider: str, message: str, code: str, detail: str | None = None):
        self.provider = provider
        self.detail = detail
        super().__init__(message, code)


class OAuthCallbackError(OAuthError):
    """Raised when a provider redirects back with an error or without a code."""

    def __init__(self, provider: str, detail: str | None = None, message: str = "OAuth authorization failed"):
        super().__init__(provider, message, "oauth_callback_error", detail)


class EmailRequiredFromProviderError(OAuthError):
    """Raised when a new identity is federated without an email address."""

    def __init__(self, provider: str, detail: str | None = None):
        super().__init__(
            provider,
            "Email permission is required to sign in with this provider",
            "email_required",
            detail,
        )


class OAuthExchangeFailedError(OAuthError):
    """Raised when the authorization code cannot be exchanged for tokens."""

    def __init__(self, provider: str, detail: str | None = None):
        super().__init__(provider, "OAuth authentication failed", "oauth_exchange_failed", detail)


class OAuthProfileFetchFailedError(OAuthError):
    """Raised when the provider profile cannot be retrieved."""

    def __init__(self, provider: str, detail: str | None = None):
        super().__init__(provider, "OAuth authentication failed", "oauth_profile_fetch_failed", detail)


class UsernameGenerationExhaustedError(ChatAuthError):
    """Raised when no free username is found within the configured number of candidates."""

    def __init__(self, base: str, attempts: int):
        self.base = base
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique username from '{base}' after {attempts} attempts",
            "username_generation_exhausted",
        )


# ---------------------------------------------------------------------------
# Persistence and cryptography errors (500 Internal Server Error)
# ---------------------------------------------------------------------------


class DatabaseError(ChatAuthError):
    """Raised for low-level database interaction errors.

    This exception wraps underlying driver errors, abstracting away
    implementation details.
    """

    def __init__(self, message: str, code: str = "database_error"):
        super().__init__(message, code)


class EncryptionError(ChatAuthError):
    """Raised when a provider token cannot be encrypted for storage."""

    def __init__(self, message: str = "A critical error occurred during data encryption.", code: str = "encryption_error"):
        super().__init__(message, code)


class DecryptionError(ChatAuthError):
    """Raised when a stored provider token cannot be decrypted.

    This could indicate data tampering or a key mismatch.
    """

    def __init__(self, message: str = "A critical error occurred during data decryption.", code: str = "decryption_error"):
        super().__init__(message, code)
