"""
Asynchronous database access.

The engine and session factory are built explicitly from settings. The
application lifespan creates them once per process, stores them on
``app.state`` and disposes the engine on shutdown; request handlers obtain a
session through the `get_db` dependency.

**Security Note**: Avoid logging the connection URL, it carries the database
password.

Key Components:
    - create_engine_from_settings: Builds the `AsyncEngine` for DATABASE_URL.
    - create_session_factory: Builds the `async_sessionmaker` bound to an engine.
    - get_db: FastAPI dependency yielding an `AsyncSession` per request.
    - create_db_and_tables: Creates all tables registered on SQLModel metadata.
    - check_database_health: Runs ``SELECT 1`` against the engine.
"""

from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from structlog import get_logger

from chatauth.core.config.settings import settings

# Registers every table on SQLModel.metadata.
import chatauth.domain.entities  # noqa: F401

logger = get_logger(__name__)


def create_engine_from_settings(database_url: Optional[str] = None) -> AsyncEngine:
    """Create the async engine.

    Pool sizing only applies to server databases; SQLite URLs (used by the
    test suite) keep SQLAlchemy's default pool.

    Args:
        database_url: Overrides ``settings.DATABASE_URL``.

    Returns:
        AsyncEngine: The configured engine.
    """
    url = make_url(database_url or settings.DATABASE_URL)
    engine_kwargs = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if not url.drivername.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.POSTGRES_POOL_SIZE,
            max_overflow=settings.POSTGRES_MAX_OVERFLOW,
            pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
        )
    logger.debug("Creating async database engine", driver=url.drivername, host=url.host)
    return create_async_engine(url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose objects stay usable after commit."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an AsyncSession.

    It rolls back the transaction if an exception occurs and ensures the
    session is closed.

    Yields:
        AsyncSession: An asynchronous database session for the request.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise


async def create_db_and_tables(engine: AsyncEngine) -> None:
    """Create all tables using the async engine."""
    logger.info("Creating database tables")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables created")


async def check_database_health(engine: AsyncEngine) -> bool:
    """Returns True when the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("database_health_check_failed", error=str(e), error_type=type(e).__name__)
        return False
    return True
