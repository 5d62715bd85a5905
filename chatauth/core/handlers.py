"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for custom application exceptions,
translating them into appropriate HTTP responses. Every error body has the
shape ``{"detail": <message>, "code": <machine code>}``.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from chatauth.core.config.settings import settings
from chatauth.core.exceptions import (
    AccountDisabledError,
    AuthenticationError,
    ChatAuthError,
    DatabaseError,
    EmailRequiredFromProviderError,
    OAuthCallbackError,
    OAuthError,
    UserAlreadyExistsError,
    UsernameGenerationExhaustedError,
    UsernameTakenError,
)

__all__ = [
    "authentication_error_handler",
    "account_disabled_error_handler",
    "conflict_error_handler",
    "oauth_error_handler",
    "username_generation_error_handler",
    "database_error_handler",
    "chatauth_error_handler",
    "unhandled_exception_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _error_response(status_code: int, exc: ChatAuthError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError` and its subclasses, returning a `401 Unauthorized`.

    This covers invalid credentials, invalid or expired tokens, tokens of the
    wrong type, and refresh failures.

    Args:
        request: The incoming `Request` object.
        exc: The `AuthenticationError` instance.

    Returns:
        A `JSONResponse` with a 401 status code and error detail.
    """
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return _error_response(status.HTTP_401_UNAUTHORIZED, exc)


async def account_disabled_error_handler(request: Request, exc: AccountDisabledError) -> JSONResponse:
    """Handles `AccountDisabledError`, returning a `403 Forbidden`."""
    logger.warning(
        "Disabled account attempted to authenticate",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return _error_response(status.HTTP_403_FORBIDDEN, exc)


async def conflict_error_handler(request: Request, exc: ChatAuthError) -> JSONResponse:
    """Handles `UserAlreadyExistsError` and `UsernameTakenError`, returning a `409 Conflict`.

    Args:
        request: The incoming `Request` object.
        exc: The conflict error instance.

    Returns:
        A `JSONResponse` with a 409 status code and error detail.
    """
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def oauth_error_handler(request: Request, exc: OAuthError) -> JSONResponse:
    """Handles federated login failures.

    Callback errors and missing provider emails are client-side problems and
    map to `400 Bad Request`; failed code exchanges and profile fetches map to
    `401 Unauthorized`. The provider diagnostic is logged, never returned.

    Args:
        request: The incoming `Request` object.
        exc: The `OAuthError` instance.

    Returns:
        A `JSONResponse` with the mapped status code and a generic error detail.
    """
    logger.warning(
        "OAuth login failed",
        provider=exc.provider,
        error=exc.code,
        provider_detail=exc.detail,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    if isinstance(exc, (OAuthCallbackError, EmailRequiredFromProviderError)):
        return _error_response(status.HTTP_400_BAD_REQUEST, exc)
    return _error_response(status.HTTP_401_UNAUTHORIZED, exc)


async def username_generation_error_handler(
    request: Request, exc: UsernameGenerationExhaustedError
) -> JSONResponse:
    """Handles `UsernameGenerationExhaustedError`, returning a `500 Internal Server Error`."""
    logger.error(
        "Username generation exhausted",
        base=exc.base,
        attempts=exc.attempts,
        path=request.url.path,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handles `DatabaseError`, returning a `500 Internal Server Error`.

    This handler catches low-level database exceptions, abstracting the
    specific database error from the client.

    Args:
        request: The incoming `Request` object.
        exc: The `DatabaseError` instance.

    Returns:
        A `JSONResponse` with a 500 status code and a generic error message.
    """
    logger.critical(
        "A critical database error occurred",
        error_message=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A database error occurred.", "code": exc.code},
    )


async def chatauth_error_handler(request: Request, exc: ChatAuthError) -> JSONResponse:
    """Handles the base `ChatAuthError`, returning a `500 Internal Server Error`.

    This serves as a fallback for any custom application errors that do not
    have a more specific handler.
    """
    logger.error(
        "An unhandled application error occurred",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred.", "code": exc.code},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handles any exception that escaped the domain, returning a `500`.

    The exception text is only included in the response when ``DEBUG`` is on.
    """
    logger.exception(
        "Unhandled exception",
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    detail = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": detail, "code": "internal_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Handlers are resolved by walking the exception's MRO, so subclasses are
    served by the most specific registered family.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(AccountDisabledError, account_disabled_error_handler)
    app.add_exception_handler(UserAlreadyExistsError, conflict_error_handler)
    app.add_exception_handler(UsernameTakenError, conflict_error_handler)
    app.add_exception_handler(OAuthError, oauth_error_handler)
    app.add_exception_handler(UsernameGenerationExhaustedError, username_generation_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(ChatAuthError, chatauth_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
