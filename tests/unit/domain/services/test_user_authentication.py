from unittest.mock import AsyncMock
import uuid

import pytest

from chatauth.core.exceptions import (
    AccountDisabledError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    UniqueConstraintViolation,
    UserAlreadyExistsError,
    UsernameTakenError,
    WrongTokenTypeError,
)
from chatauth.domain.entities.device import DeviceType
from chatauth.domain.entities.user import UserStatus
from chatauth.domain.interfaces.repositories import IUserRepository
from chatauth.domain.services.auth.user_authentication import UserAuthenticationService
from chatauth.domain.value_objects.token import TokenType
from chatauth.utils.security import DUMMY_PASSWORD_HASH, verify_password
from tests.factories import DEFAULT_PASSWORD, create_fake_user


async def _register(auth_service, email="user@example.com", username="user_one", **kwargs):
    return await auth_service.register(
        email=email,
        password=DEFAULT_PASSWORD,
        display_name="Test User",
        username=username,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_register_creates_user_and_signs_in(auth_service, token_service):
    result = await _register(
        auth_service,
        email="New.User@Example.com",
        device_token="push-1",
        device_type=DeviceType.IOS,
        device_name="iPhone",
    )

    user = result.user
    assert user.email == "new.user@example.com"
    assert user.username == "user_one"
    assert user.is_verified is False
    assert user.status is UserStatus.ONLINE
    assert user.last_seen is not None
    assert user.hashed_password != DEFAULT_PASSWORD
    assert verify_password(DEFAULT_PASSWORD, user.hashed_password)
    assert [(d.device_token, d.device_type) for d in user.devices] == [("push-1", DeviceType.IOS)]
    assert token_service.verify(result.tokens.refresh_token, TokenType.REFRESH).user_id == user.id


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email_case_insensitively(auth_service):
    await _register(auth_service, email="dup@example.com", username="first")

    with pytest.raises(UserAlreadyExistsError):
        await _register(auth_service, email="DUP@Example.com", username="second")


@pytest.mark.asyncio
async def test_register_rejects_taken_username(auth_service):
    await _register(auth_service, email="a@example.com", username="taken")

    with pytest.raises(UsernameTakenError):
        await _register(auth_service, email="b@example.com", username="taken")


@pytest.mark.asyncio
async def test_register_without_username(auth_service):
    first = await _register(auth_service, email="a@example.com", username=None)
    second = await _register(auth_service, email="b@example.com", username=None)

    assert first.user.username is None
    assert second.user.username is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, expected",
    [("email", UserAlreadyExistsError), ("username", UsernameTakenError)],
)
async def test_register_maps_concurrent_unique_violations(token_service, field, expected):
    repository = AsyncMock(spec=IUserRepository)
    repository.is_email_available.return_value = True
    repository.is_username_available.return_value = True
    repository.create.side_effect = UniqueConstraintViolation(field=field)
    service = UserAuthenticationService(repository, token_service)

    with pytest.raises(expected):
        await _register(service)


@pytest.mark.asyncio
async def test_login_success_registers_device(auth_service, user_repository, token_service):
    await user_repository.create(create_fake_user(email="login@example.com"))

    result = await auth_service.login(
        "LOGIN@example.com", DEFAULT_PASSWORD, device_token="push-9", device_type="android"
    )

    assert result.user.email == "login@example.com"
    assert result.user.status is UserStatus.ONLINE
    assert [d.device_token for d in result.user.devices] == ["push-9"]
    assert token_service.verify(result.tokens.access_token, TokenType.ACCESS).user_id == result.user.id


@pytest.mark.asyncio
async def test_login_twice_from_same_device_keeps_one_entry(auth_service, user_repository):
    await user_repository.create(create_fake_user(email="twice@example.com"))

    await auth_service.login("twice@example.com", DEFAULT_PASSWORD, device_token="push-1", device_name="Old")
    result = await auth_service.login(
        "twice@example.com", DEFAULT_PASSWORD, device_token="push-1", device_name="New"
    )

    assert len(result.user.devices) == 1
    assert result.user.devices[0].device_name == "New"


@pytest.mark.asyncio
async def test_login_unknown_email_spends_a_hash_check(auth_service, mocker):
    verify = mocker.patch(
        "chatauth.domain.services.auth.user_authentication.verify_password", return_value=False
    )

    with pytest.raises(InvalidCredentialsError) as exc_info:
        await auth_service.login("ghost@example.com", DEFAULT_PASSWORD)

    verify.assert_called_once_with(DEFAULT_PASSWORD, DUMMY_PASSWORD_HASH)
    assert exc_info.value.message == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_wrong_password_matches_unknown_email_error(auth_service, user_repository):
    await user_repository.create(create_fake_user(email="known@example.com"))

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await auth_service.login("known@example.com", "not-the-password")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await auth_service.login("unknown@example.com", "not-the-password")

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.code == unknown_email.value.code


@pytest.mark.asyncio
async def test_login_inactive_user_is_disabled(auth_service, user_repository):
    await user_repository.create(create_fake_user(email="inactive@example.com", is_active=False))

    with pytest.raises(AccountDisabledError):
        await auth_service.login("inactive@example.com", DEFAULT_PASSWORD)


@pytest.mark.asyncio
async def test_refresh_rotates_both_tokens(auth_service, token_service):
    registered = await _register(auth_service)

    refreshed = await auth_service.refresh(registered.tokens.refresh_token)

    assert refreshed.user.id == registered.user.id
    assert refreshed.tokens.access_token != registered.tokens.access_token
    assert refreshed.tokens.refresh_token != registered.tokens.refresh_token
    assert token_service.verify(refreshed.tokens.refresh_token, TokenType.REFRESH).user_id == registered.user.id


@pytest.mark.asyncio
async def test_refresh_with_access_token_is_wrong_type(auth_service):
    registered = await _register(auth_service)

    with pytest.raises(WrongTokenTypeError):
        await auth_service.refresh(registered.tokens.access_token)


@pytest.mark.asyncio
async def test_refresh_with_garbage_is_invalid(auth_service):
    with pytest.raises(InvalidRefreshTokenError):
        await auth_service.refresh("garbage")


@pytest.mark.asyncio
async def test_refresh_for_unknown_user_is_invalid(auth_service, token_service):
    tokens = token_service.issue(uuid.uuid4())

    with pytest.raises(InvalidRefreshTokenError):
        await auth_service.refresh(tokens.refresh_token)


@pytest.mark.asyncio
async def test_refresh_for_deactivated_user_is_invalid(auth_service, user_repository):
    registered = await _register(auth_service)
    registered.user.is_active = False
    await user_repository.save(registered.user)

    with pytest.raises(InvalidRefreshTokenError):
        await auth_service.refresh(registered.tokens.refresh_token)


@pytest.mark.asyncio
async def test_logout_removes_only_named_device(auth_service):
    registered = await _register(auth_service, device_token="phone")
    await auth_service.login("user@example.com", DEFAULT_PASSWORD, device_token="laptop")

    await auth_service.logout(registered.user, device_token="phone")

    assert [d.device_token for d in registered.user.devices] == ["laptop"]


@pytest.mark.asyncio
async def test_logout_with_unknown_device_is_noop(auth_service, user_repository, mocker):
    registered = await _register(auth_service, device_token="phone")
    save = mocker.spy(user_repository, "save")

    await auth_service.logout(registered.user, device_token="unknown")
    await auth_service.logout(registered.user)

    save.assert_not_called()
    assert len(registered.user.devices) == 1


@pytest.mark.asyncio
async def test_get_current_user(auth_service):
    registered = await _register(auth_service)

    user = await auth_service.get_current_user(registered.tokens.access_token)

    assert user.id == registered.user.id


@pytest.mark.asyncio
async def test_get_current_user_rejects_refresh_token(auth_service):
    registered = await _register(auth_service)

    with pytest.raises(WrongTokenTypeError):
        await auth_service.get_current_user(registered.tokens.refresh_token)


@pytest.mark.asyncio
async def test_get_current_user_rejects_inactive_user(auth_service, user_repository):
    registered = await _register(auth_service)
    registered.user.is_active = False
    await user_repository.save(registered.user)

    with pytest.raises(InvalidTokenError):
        await auth_service.get_current_user(registered.tokens.access_token)


@pytest.mark.asyncio
async def test_login_updates_device_registered_concurrently(token_service):
    stale = create_fake_user(email="tabs@example.com")
    fresh = create_fake_user(email="tabs@example.com")
    fresh.upsert_device("push-1", device_name="Other tab")
    repository = AsyncMock(spec=IUserRepository)
    repository.get_by_email.side_effect = [stale, fresh]
    repository.save.side_effect = [UniqueConstraintViolation(field="device_token"), fresh]
    service = UserAuthenticationService(repository, token_service)

    result = await service.login("tabs@example.com", DEFAULT_PASSWORD, device_token="push-1", device_name="Phone")

    assert result.user is fresh
    assert [(d.device_token, d.device_name) for d in fresh.devices] == [("push-1", "Phone")]
    assert fresh.status is UserStatus.ONLINE


@pytest.mark.asyncio
async def test_login_propagates_other_unique_violations(token_service):
    repository = AsyncMock(spec=IUserRepository)
    repository.get_by_email.return_value = create_fake_user(email="odd@example.com")
    repository.save.side_effect = UniqueConstraintViolation(field="email")
    service = UserAuthenticationService(repository, token_service)

    with pytest.raises(UniqueConstraintViolation):
        await service.login("odd@example.com", DEFAULT_PASSWORD, device_token="push-1")
