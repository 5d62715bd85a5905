import pytest
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

from chatauth.core.dependencies.auth import ACCESS_TOKEN_COOKIE, get_access_token
from chatauth.core.exceptions import AuthenticationError


def _request(cookie: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", f"{ACCESS_TOKEN_COOKIE}={cookie}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers, "query_string": b""})


def test_bearer_header_wins_over_cookie():
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="header-token")

    assert get_access_token(_request(cookie="cookie-token"), credentials) == "header-token"


def test_cookie_is_used_without_header():
    assert get_access_token(_request(cookie="cookie-token"), None) == "cookie-token"


def test_missing_token_is_rejected():
    with pytest.raises(AuthenticationError) as exc_info:
        get_access_token(_request(), None)

    assert exc_info.value.code == "missing_token"
