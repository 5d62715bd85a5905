from chatauth.domain.interfaces.oauth import IOAuthProviderClient, ITokenEncryptionService
from chatauth.domain.interfaces.repositories import IUserRepository

__all__ = ["IOAuthProviderClient", "ITokenEncryptionService", "IUserRepository"]
