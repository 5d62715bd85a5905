"""
OAuth provider settings.
"""
from typing import List, Union

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class OAuthSettings(BaseSettings):
    """
    Client registration for the Google and Facebook login flows.

    Security Note:
        - Client secrets must never be logged or committed.
        - Redirect URIs must exactly match the ones registered with the provider.
    """
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: SecretStr = SecretStr("")
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/api/v1/auth/google/callback"
    GOOGLE_SCOPES: Union[str, List[str]] = Field(default="openid,profile,email")

    FACEBOOK_APP_ID: str = ""
    FACEBOOK_APP_SECRET: SecretStr = SecretStr("")
    FACEBOOK_REDIRECT_URI: str = "http://localhost:8000/api/v1/auth/facebook/callback"
    FACEBOOK_SCOPES: Union[str, List[str]] = Field(default="email,public_profile")
    FACEBOOK_LONG_LIVED_TOKEN: bool = True

    OAUTH_HTTP_TIMEOUT: float = Field(gt=0, default=10.0)

    @field_validator("GOOGLE_SCOPES", "FACEBOOK_SCOPES", mode="before")
    @classmethod
    def split_scopes(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            return [scope.strip() for scope in v.split(",") if scope.strip()]
        return v
