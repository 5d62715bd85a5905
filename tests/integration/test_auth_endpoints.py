import pytest
from fastapi import status

from chatauth.infrastructure.repositories.user_repository import UserRepository
from tests.factories import DEFAULT_PASSWORD, create_fake_registration, create_fake_user

API = "/api/v1/auth"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def _register(client, **overrides):
    response = await client.post(f"{API}/register", json=create_fake_registration(**overrides))
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


@pytest.mark.asyncio
async def test_register_returns_public_user_and_tokens(async_client):
    payload = create_fake_registration(email="Register.Me@Example.com", username="register_me")

    response = await async_client.post(f"{API}/register", json=payload)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["user"]["email"] == "register.me@example.com"
    assert body["user"]["username"] == "register_me"
    assert body["user"]["status"] == "online"
    assert body["user"]["providers"] == []
    assert body["tokens"]["token_type"] == "bearer"
    assert body["tokens"]["expires_in"] > 0
    assert "hashed_password" not in response.text
    assert DEFAULT_PASSWORD not in response.text


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(async_client):
    await _register(async_client, email="dup@example.com")

    response = await async_client.post(
        f"{API}/register", json=create_fake_registration(email="DUP@example.com")
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "user_exists"


@pytest.mark.asyncio
async def test_register_duplicate_username_conflicts(async_client):
    await _register(async_client, username="same_name")

    response = await async_client.post(f"{API}/register", json=create_fake_registration(username="same_name"))

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "username_taken"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"password": "short"},
        {"email": "not-an-email"},
        {"display_name": ""},
        {"username": "no spaces allowed"},
        {"device_type": "smartwatch"},
    ],
)
async def test_register_validates_payload(async_client, overrides):
    response = await async_client.post(f"{API}/register", json=create_fake_registration(**overrides))

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_login_success(async_client):
    registered = await _register(async_client, email="login@example.com")

    response = await async_client.post(
        f"{API}/login",
        json={"email": "Login@Example.com", "password": DEFAULT_PASSWORD, "device_token": "push-1"},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user"]["id"] == registered["user"]["id"]


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(async_client):
    await _register(async_client, email="known@example.com")

    wrong_password = await async_client.post(
        f"{API}/login", json={"email": "known@example.com", "password": "wrong-password"}
    )
    unknown_email = await async_client.post(
        f"{API}/login", json={"email": "unknown@example.com", "password": "wrong-password"}
    )

    assert wrong_password.status_code == unknown_email.status_code == status.HTTP_401_UNAUTHORIZED
    assert wrong_password.json() == unknown_email.json()


@pytest.mark.asyncio
async def test_login_disabled_account_is_forbidden(async_client, session_factory):
    async with session_factory() as session:
        await UserRepository(session).create(create_fake_user(email="off@example.com", is_active=False))

    response = await async_client.post(
        f"{API}/login", json={"email": "off@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "account_disabled"


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(async_client):
    registered = await _register(async_client)

    response = await async_client.post(
        f"{API}/refresh", json={"refresh_token": registered["tokens"]["refresh_token"]}
    )

    assert response.status_code == status.HTTP_200_OK
    tokens = response.json()["tokens"]
    assert tokens["access_token"] != registered["tokens"]["access_token"]
    assert tokens["refresh_token"] != registered["tokens"]["refresh_token"]


@pytest.mark.asyncio
async def test_refresh_with_access_token_is_rejected(async_client):
    registered = await _register(async_client)

    response = await async_client.post(
        f"{API}/refresh", json={"refresh_token": registered["tokens"]["access_token"]}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "invalid_token_type"


@pytest.mark.asyncio
async def test_refresh_with_invalid_token(async_client):
    response = await async_client.post(f"{API}/refresh", json={"refresh_token": "garbage"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "invalid_refresh_token"


@pytest.mark.asyncio
async def test_me_with_bearer_token(async_client):
    registered = await _register(async_client)

    response = await async_client.get(f"{API}/me", headers=_bearer(registered["tokens"]["access_token"]))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == registered["user"]["id"]
    assert "hashed_password" not in response.json()


@pytest.mark.asyncio
async def test_me_with_cookie(async_client):
    registered = await _register(async_client)

    response = await async_client.get(
        f"{API}/me", headers={"Cookie": f"accessToken={registered['tokens']['access_token']}"}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == registered["user"]["email"]


@pytest.mark.asyncio
async def test_me_without_token(async_client):
    response = await async_client.get(f"{API}/me")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "missing_token"


@pytest.mark.asyncio
async def test_me_with_refresh_token_is_rejected(async_client):
    registered = await _register(async_client)

    response = await async_client.get(f"{API}/me", headers=_bearer(registered["tokens"]["refresh_token"]))

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "invalid_token_type"


@pytest.mark.asyncio
async def test_logout_removes_device_and_clears_cookies(async_client, session_factory):
    registered = await _register(async_client, device_token="phone", device_type="ios")

    response = await async_client.post(
        f"{API}/logout",
        json={"device_token": "phone"},
        headers=_bearer(registered["tokens"]["access_token"]),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Logged out successfully"}
    set_cookies = response.headers.get_list("set-cookie")
    assert any(cookie.startswith("accessToken=") and "Max-Age=0" in cookie for cookie in set_cookies)
    assert any(cookie.startswith("refreshToken=") and "Max-Age=0" in cookie for cookie in set_cookies)

    async with session_factory() as session:
        user = await UserRepository(session).get_by_email(registered["user"]["email"])
        assert user.devices == []


@pytest.mark.asyncio
async def test_logout_without_body_succeeds(async_client):
    registered = await _register(async_client)

    response = await async_client.post(f"{API}/logout", headers=_bearer(registered["tokens"]["access_token"]))

    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_logout_requires_authentication(async_client):
    response = await async_client.post(f"{API}/logout", json={"device_token": "phone"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
