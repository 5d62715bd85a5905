from datetime import timedelta

from chatauth.domain.entities.auth_provider import AuthProvider, Provider
from chatauth.domain.entities.device import DeviceType
from chatauth.domain.entities.user import Theme, UserStatus
from chatauth.utils.clock import utc_now
from tests.factories import create_fake_user


def test_new_user_defaults():
    user = create_fake_user()

    assert user.is_active is True
    assert user.is_verified is False
    assert user.status is UserStatus.OFFLINE
    assert user.theme is Theme.LIGHT
    assert user.language == "vi"
    assert user.providers == []
    assert user.devices == []
    assert user.last_seen is None


def test_mark_authenticated_sets_online_and_last_seen():
    user = create_fake_user()
    before = utc_now()

    user.mark_authenticated()

    assert user.status is UserStatus.ONLINE
    assert user.last_seen >= before
    assert user.updated_at == user.last_seen


def test_upsert_device_appends_new_token():
    user = create_fake_user()

    device = user.upsert_device("token-1", DeviceType.IOS, "iPhone")

    assert user.devices == [device]
    assert device.device_type is DeviceType.IOS
    assert device.device_name == "iPhone"
    assert device.is_active is True


def test_upsert_device_defaults_to_web():
    user = create_fake_user()

    device = user.upsert_device("browser-token")

    assert device.device_type is DeviceType.WEB


def test_upsert_device_refreshes_existing_token_in_place():
    user = create_fake_user()
    first = user.upsert_device("token-1", "android", "Pixel")
    first.is_active = False
    first.last_used_at = utc_now() - timedelta(days=3)

    second = user.upsert_device("token-1", device_name="Pixel 8")

    assert second is first
    assert len(user.devices) == 1
    assert second.device_type is DeviceType.ANDROID
    assert second.device_name == "Pixel 8"
    assert second.is_active is True
    assert second.last_used_at > utc_now() - timedelta(minutes=1)


def test_remove_device_only_removes_matching_token():
    user = create_fake_user()
    user.upsert_device("keep")
    user.upsert_device("drop")

    assert user.remove_device("drop") is True
    assert [device.device_token for device in user.devices] == ["keep"]


def test_remove_unknown_device_is_noop():
    user = create_fake_user()
    user.upsert_device("keep")

    assert user.remove_device("unknown") is False
    assert len(user.devices) == 1


def test_find_provider_matches_provider_and_id():
    user = create_fake_user()
    google = AuthProvider(provider=Provider.GOOGLE, provider_id="123")
    facebook = AuthProvider(provider=Provider.FACEBOOK, provider_id="123")
    user.providers.extend([google, facebook])

    assert user.find_provider(Provider.FACEBOOK, "123") is facebook
    assert user.find_provider("google", "123") is google
    assert user.find_provider(Provider.GOOGLE, "999") is None
    assert user.provider_names == ["google", "facebook"]
