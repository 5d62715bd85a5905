"""Application lifecycle management.

This module handles application startup and shutdown events: the database
engine and session factory are created once per process on startup and the
engine is disposed on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from chatauth.core.config.settings import settings
from chatauth.core.logging import logger
from chatauth.infrastructure.database import (
    check_database_health,
    create_db_and_tables,
    create_engine_from_settings,
    create_session_factory,
)


def create_lifespan_manager(create_tables: bool = True):
    """Create the application lifespan manager.

    Args:
        create_tables: Create missing tables on startup. Deployments managed
            with Alembic migrations can turn this off.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager that handles startup and shutdown events.

        Args:
            app (FastAPI): The FastAPI application instance

        Raises:
            RuntimeError: If database is unavailable during startup
        """
        # Startup
        engine = create_engine_from_settings()
        if not await check_database_health(engine):
            logger.error("database_unavailable_on_startup")
            await engine.dispose()
            raise RuntimeError("Database unavailable")
        if create_tables:
            await create_db_and_tables(engine)

        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        # Shutdown
        await engine.dispose()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
