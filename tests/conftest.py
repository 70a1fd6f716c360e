import pytest

from FieldSecurity.key_management import derive_key
from FieldSecurity.security_bootstrap import initialize_encryption
from FieldSecurity.security_config import CryptoSettings, DecodeMode


@pytest.fixture(scope="session")
def key():
    return derive_key("s3cret")


@pytest.fixture(scope="session")
def other_key():
    return derive_key("another-secret")


@pytest.fixture
def settings():
    return CryptoSettings(secret="s3cret", environment="test", metrics_enabled=True)


@pytest.fixture
def crypto(settings):
    return initialize_encryption(settings)


@pytest.fixture
def strict_crypto():
    return initialize_encryption(
        CryptoSettings(secret="s3cret", environment="test", decode_mode=DecodeMode.STRICT)
    )
