import pytest
from cryptography.fernet import Fernet

from chatauth.core.exceptions import DecryptionError
from chatauth.infrastructure.services.authentication.token_encryption import FernetTokenEncryptionService


def test_encrypted_value_is_opaque_and_recoverable(token_encryption):
    encrypted = token_encryption.encrypt("provider-access-token")

    assert isinstance(encrypted, bytes)
    assert b"provider-access-token" not in encrypted
    assert token_encryption.decrypt(encrypted) == "provider-access-token"


def test_none_passes_through(token_encryption):
    assert token_encryption.encrypt(None) is None
    assert token_encryption.decrypt(None) is None


def test_value_from_another_key_cannot_be_decrypted(token_encryption):
    other = FernetTokenEncryptionService(Fernet.generate_key().decode())

    with pytest.raises(DecryptionError):
        token_encryption.decrypt(other.encrypt("secret"))


def test_tampered_value_cannot_be_decrypted(token_encryption):
    encrypted = bytearray(token_encryption.encrypt("secret"))
    encrypted[-5] ^= 0x01

    with pytest.raises(DecryptionError):
        token_encryption.decrypt(bytes(encrypted))


def test_invalid_key_is_rejected():
    with pytest.raises(ValueError):
        FernetTokenEncryptionService("not-a-fernet-key")
