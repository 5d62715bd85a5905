from chatauth.infrastructure.services.oauth.facebook import FacebookOAuthClient
from chatauth.infrastructure.services.oauth.google import GoogleOAuthClient

__all__ = ["FacebookOAuthClient", "GoogleOAuthClient"]
