import pytest

from chatauth.utils.masking import mask_email, mask_username
from chatauth.utils.security import hash_password, hash_unusable_password, verify_password


def test_hash_and_verify_password():
    hashed = hash_password("Str0ngP@ssw0rd")

    assert hashed != "Str0ngP@ssw0rd"
    assert hashed.startswith("$2")
    assert verify_password("Str0ngP@ssw0rd", hashed)
    assert not verify_password("wrong", hashed)


def test_malformed_hash_never_matches():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_unusable_passwords_are_distinct():
    assert hash_unusable_password() != hash_unusable_password()


@pytest.mark.parametrize(
    "email, expected",
    [("john.doe@example.com", "jo***@example.com"), ("a@b.c", "a***@b.c"), (None, None), ("", "")],
)
def test_mask_email(email, expected):
    assert mask_email(email) == expected


@pytest.mark.parametrize("username, expected", [("johndoe", "joh***"), ("bob", "bob"), (None, None)])
def test_mask_username(username, expected):
    assert mask_username(username) == expected
