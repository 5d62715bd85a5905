from chatauth.domain.value_objects.oauth import ProviderProfile, ProviderTokens
from chatauth.domain.value_objects.token import TokenClaims, TokenPair, TokenType

__all__ = ["ProviderProfile", "ProviderTokens", "TokenClaims", "TokenPair", "TokenType"]
