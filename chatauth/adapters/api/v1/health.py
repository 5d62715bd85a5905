"""Liveness endpoint reporting the database connectivity."""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from chatauth.core.config.settings import settings
from chatauth.core.logging import logger
from chatauth.infrastructure.dependency_injection.auth_dependencies import AsyncDB

router = APIRouter()


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    env: str
    database: Literal["healthy", "unhealthy"]


@router.get("", response_model=HealthResponse)
async def health_check(db: AsyncDB) -> HealthResponse:
    """Reports ``ok`` when the database answers, ``degraded`` otherwise."""
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except (SQLAlchemyError, OSError) as e:
        logger.error("database_health_check_failed", error=str(e), error_type=type(e).__name__)
        database = "unhealthy"

    return HealthResponse(
        status="ok" if database == "healthy" else "degraded",
        env=settings.APP_ENV,
        database=database,
    )
