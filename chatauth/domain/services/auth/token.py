"""JWT issuance and verification.

Access and refresh tokens are HS256 JWTs signed with two different secrets.
A token therefore only verifies under the secret of its own type, which lets
`verify` tell a forged or expired token apart from a genuine token of the
other type.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import secrets
import uuid

import jwt
from structlog import get_logger

from chatauth.core.config.settings import settings
from chatauth.core.exceptions import InvalidTokenError, WrongTokenTypeError
from chatauth.domain.value_objects.token import TokenClaims, TokenPair, TokenType
from chatauth.utils.clock import utc_now

logger = get_logger(__name__)

REQUIRED_CLAIMS = ["sub", "type", "iat", "exp", "jti"]


class TokenService:
    """Service for creating and validating access and refresh tokens.

    The service is pure: it holds no per-user state and never touches storage,
    so one instance can be shared by every request.

    Attributes:
        access_ttl (timedelta): Lifetime of access tokens.
        refresh_ttl (timedelta): Lifetime of refresh tokens.
    """

    def __init__(
        self,
        access_secret: Optional[str] = None,
        refresh_secret: Optional[str] = None,
        access_ttl: Optional[timedelta] = None,
        refresh_ttl: Optional[timedelta] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        algorithm: Optional[str] = None,
    ):
        self._secrets = {
            TokenType.ACCESS: access_secret or settings.JWT_ACCESS_SECRET.get_secret_value(),
            TokenType.REFRESH: refresh_secret or settings.JWT_REFRESH_SECRET.get_secret_value(),
        }
        if self._secrets[TokenType.ACCESS] == self._secrets[TokenType.REFRESH]:
            raise ValueError("Access and refresh tokens must be signed with different secrets")
        self.access_ttl = access_ttl or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = refresh_ttl or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        self.issuer = issuer or settings.JWT_ISSUER
        self.audience = audience or settings.JWT_AUDIENCE
        self.algorithm = algorithm or settings.JWT_ALGORITHM

    def issue(self, user_id: uuid.UUID | str, now: Optional[datetime] = None) -> TokenPair:
        """Issue a fresh access/refresh token pair for a user.

        Args:
            user_id: Identifier placed in the ``sub`` claim.
            now: Issue time; defaults to the current time.

        Returns:
            TokenPair: The signed tokens and the access token lifetime in seconds.
        """
        now = now or utc_now()
        access_token = self._encode(user_id, TokenType.ACCESS, now, self.access_ttl)
        refresh_token = self._encode(user_id, TokenType.REFRESH, now, self.refresh_ttl)
        logger.debug("Token pair issued", user_id=str(user_id))
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def verify(self, token: str, expected_type: TokenType | str) -> TokenClaims:
        """Validate a token of the expected type and return its claims.

        Args:
            token: Encoded JWT.
            expected_type: ``access`` or ``refresh``.

        Returns:
            TokenClaims: The verified claims.

        Raises:
            WrongTokenTypeError: If the token is genuine but of the other type.
            InvalidTokenError: If the token is malformed, forged, expired, or
                lacks a required claim.
        """
        expected_type = TokenType(expected_type)
        try:
            payload = self._decode(token, expected_type)
        except jwt.InvalidSignatureError:
            if self._verifies_as(token, self._counterpart(expected_type)):
                logger.warning("Token of wrong type presented", expected_type=expected_type.value)
                raise WrongTokenTypeError() from None
            logger.warning("Token signature verification failed", expected_type=expected_type.value)
            raise InvalidTokenError() from None
        except jwt.ExpiredSignatureError:
            logger.debug("Expired token presented", expected_type=expected_type.value)
            raise InvalidTokenError("Token has expired") from None
        except jwt.PyJWTError as e:
            logger.warning(
                "Token validation failed",
                expected_type=expected_type.value,
                error_type=type(e).__name__,
            )
            raise InvalidTokenError() from None

        if payload.get("type") != expected_type.value:
            logger.warning(
                "Token type claim mismatch",
                expected_type=expected_type.value,
                token_type=payload.get("type"),
            )
            raise WrongTokenTypeError()

        try:
            user_id = uuid.UUID(str(payload["sub"]))
        except ValueError:
            raise InvalidTokenError() from None

        return TokenClaims(
            user_id=user_id,
            token_type=expected_type,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            jti=payload["jti"],
        )

    def _encode(self, user_id, token_type: TokenType, now: datetime, ttl: timedelta) -> str:
        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "type": token_type.value,
            "iat": now,
            "exp": now + ttl,
            "jti": secrets.token_urlsafe(24),
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def _decode(self, token: str, token_type: TokenType) -> Dict[str, Any]:
        return jwt.decode(
            token,
            self._secrets[token_type],
            algorithms=[self.algorithm],
            issuer=self.issuer,
            audience=self.audience,
            options={"require": REQUIRED_CLAIMS},
        )

    def _verifies_as(self, token: str, token_type: TokenType) -> bool:
        try:
            self._decode(token, token_type)
        except jwt.PyJWTError:
            return False
        return True

    @staticmethod
    def _counterpart(token_type: TokenType) -> TokenType:
        return TokenType.REFRESH if token_type is TokenType.ACCESS else TokenType.ACCESS
