"""User Repository implementation using SQLAlchemy.

This module provides the repository pattern implementation for the `User`
aggregate, abstracting database access behind `IUserRepository`.

The storage unique indexes are the final authority on identity uniqueness:
`IntegrityError`s raised while committing are translated into
`UniqueConstraintViolation` naming the colliding field, so callers can react
to races that slipped past their availability checks. Every other storage
failure is logged and re-raised as `DatabaseError`.
"""

from typing import Optional
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer
from structlog import get_logger

from chatauth.core.exceptions import DatabaseError, UniqueConstraintViolation
from chatauth.domain.entities.auth_provider import AuthProvider, Provider
from chatauth.domain.entities.user import User
from chatauth.domain.interfaces.repositories import IUserRepository
from chatauth.utils.masking import mask_email, mask_username

logger = get_logger(__name__)

# Substrings identifying the violated index in driver error messages, e.g.
# 'duplicate key value violates unique constraint "uq_users_email"' (PostgreSQL)
# or 'UNIQUE constraint failed: users.email' (SQLite).
_UNIQUE_FIELD_MARKERS = (
    ("username", ("uq_users_username", "users.username")),
    ("email", ("uq_users_email", "users.email")),
    ("provider_identity", ("uq_auth_providers_provider_identity", "auth_providers.provider_id")),
    ("device_token", ("uq_devices_user_token", "devices.device_token")),
)


def _violated_field(exc: IntegrityError) -> Optional[str]:
    message = str(exc.orig) if exc.orig is not None else str(exc)
    for field, markers in _UNIQUE_FIELD_MARKERS:
        if any(marker in message for marker in markers):
            return field
    return None


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of `IUserRepository`.

    Responsibilities:
    - User aggregate persistence (user, provider entries, devices)
    - Translation of unique index violations into domain errors
    - Secure logging with sensitive data masking

    The default projection defers ``hashed_password``; only
    ``get_by_email(..., include_password=True)`` loads it.
    """

    def __init__(self, db_session: AsyncSession):
        """Initialize repository with database session.

        Args:
            db_session: SQLAlchemy async session for database operations
        """
        self.db_session = db_session

    def _select_user(self, include_password: bool = False):
        statement = select(User)
        if not include_password:
            statement = statement.options(defer(User.hashed_password))
        return statement

    async def _first(self, statement, operation: str) -> Optional[User]:
        try:
            result = await self.db_session.execute(statement)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(
                "Error retrieving user",
                error=str(e),
                error_type=type(e).__name__,
                operation=operation,
            )
            raise DatabaseError(f"Failed to load user ({operation})") from e

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID.

        Args:
            user_id: User UUID (a string form is accepted as well)

        Returns:
            User entity if found, None otherwise
        """
        if not isinstance(user_id, uuid.UUID):
            try:
                user_id = uuid.UUID(str(user_id))
            except ValueError:
                logger.warning("Invalid user ID provided", error_type="validation_error")
                return None

        user = await self._first(self._select_user().where(User.id == user_id), "get_by_id")
        logger.debug("User lookup by ID completed", user_id=str(user_id), found=user is not None)
        return user

    async def get_by_email(self, email: str, include_password: bool = False) -> Optional[User]:
        """Get user by email address, case-insensitively.

        Args:
            email: Email address to search for
            include_password: Also load the password hash

        Returns:
            User entity if found, None otherwise
        """
        if not email or not email.strip():
            return None
        email_value = email.strip().lower()

        statement = self._select_user(include_password).where(User.email == email_value)
        if include_password:
            # A user already in the identity map keeps its deferred column
            # unloaded unless the row is applied again.
            statement = statement.execution_options(populate_existing=True)

        user = await self._first(statement, "get_by_email")
        logger.debug(
            "User lookup by email completed",
            email=mask_email(email_value),
            found=user is not None,
            include_password=include_password,
        )
        return user

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username.

        Args:
            username: Username to search for

        Returns:
            User entity if found, None otherwise
        """
        if not username or not username.strip():
            return None
        username_value = username.strip()

        user = await self._first(
            self._select_user().where(User.username == username_value), "get_by_username"
        )
        logger.debug(
            "User lookup by username completed",
            username=mask_username(username_value),
            found=user is not None,
        )
        return user

    async def get_by_provider_identity(self, provider: Provider | str, provider_id: str) -> Optional[User]:
        """Get the user linked to an external provider identity.

        Args:
            provider: OAuth provider
            provider_id: The user's identifier at the provider

        Returns:
            User entity if found, None otherwise
        """
        statement = (
            self._select_user()
            .join(AuthProvider, AuthProvider.user_id == User.id)
            .where(AuthProvider.provider == Provider(provider), AuthProvider.provider_id == provider_id)
            .execution_options(populate_existing=True)
        )
        user = await self._first(statement, "get_by_provider_identity")
        logger.debug(
            "User lookup by provider identity completed",
            provider=Provider(provider).value,
            found=user is not None,
        )
        return user

    async def is_email_available(self, email: str) -> bool:
        statement = select(User.id).where(User.email == email.strip().lower()).limit(1)
        try:
            result = await self.db_session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Error checking email availability", error=str(e), error_type=type(e).__name__)
            raise DatabaseError("Failed to check email availability") from e
        return result.first() is None

    async def is_username_available(self, username: str) -> bool:
        statement = select(User.id).where(User.username == username.strip()).limit(1)
        try:
            result = await self.db_session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Error checking username availability", error=str(e), error_type=type(e).__name__)
            raise DatabaseError("Failed to check username availability") from e
        return result.first() is None

    async def create(self, user: User) -> User:
        """Insert a new user aggregate.

        Args:
            user: Transient user, with any initial provider entries and devices

        Returns:
            The persisted user

        Raises:
            UniqueConstraintViolation: If a unique index (email, username, provider
                identity or device token) rejects the write
            DatabaseError: For any other storage failure
        """
        user.email = user.email.strip().lower()
        self.db_session.add(user)
        logger.debug(
            "Adding new user to session",
            email=mask_email(user.email),
            username=mask_username(user.username),
            operation="create",
        )
        await self._commit(user, "create")
        try:
            # Eager loaders only run on SELECT; load the child collections now
            # so later reads never trigger a lazy load outside the event loop.
            await self.db_session.refresh(user, attribute_names=["providers", "devices"])
        except SQLAlchemyError as e:
            logger.error("Error reloading created user", error=str(e), error_type=type(e).__name__)
            raise DatabaseError("Failed to reload created user") from e
        logger.info("User created", user_id=str(user.id), username=mask_username(user.username))
        return user

    async def save(self, user: User) -> User:
        """Commit all pending changes of the user aggregate in one transaction.

        Args:
            user: User entity to update

        Returns:
            The saved user

        Raises:
            UniqueConstraintViolation: If a unique index (email, username, provider
                identity or device token) rejects the write
            DatabaseError: For any other storage failure
        """
        self.db_session.add(user)
        await self._commit(user, "save")
        logger.debug("User saved", user_id=str(user.id), operation="save")
        return user

    async def _commit(self, user: User, operation: str) -> None:
        # Read before committing: a rollback expires persistent instances.
        masked_email = mask_email(user.email)
        masked_username = mask_username(user.username)
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            field = _violated_field(e)
            logger.warning(
                "Unique constraint violated",
                field=field,
                email=masked_email,
                username=masked_username,
                operation=operation,
            )
            if field is None:
                raise DatabaseError(f"Integrity error during {operation}") from e
            raise UniqueConstraintViolation(field=field) from e
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error(
                "Error saving user",
                error=str(e),
                error_type=type(e).__name__,
                operation=operation,
            )
            raise DatabaseError(f"Failed to persist user ({operation})") from e
