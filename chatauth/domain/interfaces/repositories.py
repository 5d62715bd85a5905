"""Repository interfaces for abstracting data persistence in the domain layer.

This module defines the abstract base classes (interfaces) for repositories,
which act as a "port" in the context of Hexagonal Architecture. The domain layer
uses these interfaces to interact with persistence mechanisms without being
coupled to any specific technology.
"""

from abc import ABC, abstractmethod
from typing import Optional
import uuid

from chatauth.domain.entities.auth_provider import Provider
from chatauth.domain.entities.user import User


class IUserRepository(ABC):
    """An interface defining the contract for user persistence operations.

    This repository is responsible for managing the lifecycle of the `User`
    aggregate root, including its provider entries and devices.
    """

    @abstractmethod
    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Retrieves a user by their unique identifier.

        Returns:
            An optional `User` entity. Returns `None` if no user is found.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, email: str, include_password: bool = False) -> Optional[User]:
        """Retrieves a user by their email address (case-insensitively).

        Args:
            email: The email address to search for.
            include_password: Load the password hash, which is otherwise deferred.

        Returns:
            An optional `User` entity. Returns `None` if no user is found.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Retrieves a user by their username.

        Returns:
            An optional `User` entity. Returns `None` if no user is found.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_provider_identity(self, provider: Provider | str, provider_id: str) -> Optional[User]:
        """Retrieves the user linked to an external identity.

        Args:
            provider: The OAuth provider.
            provider_id: The user's identifier at that provider.

        Returns:
            An optional `User` entity. Returns `None` if the identity is not linked.
        """
        raise NotImplementedError

    @abstractmethod
    async def is_email_available(self, email: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def is_username_available(self, username: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persists a new user with its initial provider entries and devices.

        Raises:
            UniqueConstraintViolation: If a unique index rejects the write; ``field``
                names it.
            DatabaseError: For any other storage failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def save(self, user: User) -> User:
        """Commits all pending changes of the user aggregate in one transaction.

        Raises:
            UniqueConstraintViolation: If a unique index rejects the write; ``field``
                names it.
            DatabaseError: For any other storage failure.
        """
        raise NotImplementedError
