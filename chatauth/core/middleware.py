"""Middleware configuration for the FastAPI application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatauth.core.config.settings import settings


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the FastAPI application.

    Credentials are allowed because the OAuth flow hands tokens to the client
    application in cookies.

    Args:
        app (FastAPI): The FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
