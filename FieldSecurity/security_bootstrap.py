"""
Security bootstrap utilities.

Derives the field encryption key once from injected settings and exposes a
small facade that route handlers and ETL jobs call for every sensitive field.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from FieldSecurity.activity_logging import configure_crypto_logging
from FieldSecurity.data_integrity import hash_email, hash_value, matches_hash
from FieldSecurity.field_level_encryption import (
    EncryptedField,
    decrypt_field,
    encrypt_field,
    encrypt_packed,
    encrypt_record,
)
from FieldSecurity.key_management import DerivedKey, derive_key
from FieldSecurity.metrics import configure_metrics
from FieldSecurity.safe_decode import (
    DecodeResult,
    decode_record,
    safe_decode,
    safe_decrypt_packed,
)
from FieldSecurity.security_config import CryptoSettings, DecodeMode, load_crypto_settings


class FieldCrypto:
    """Key-bound entry point for encrypting, decoding and hashing fields."""

    def __init__(self, key: DerivedKey, settings: CryptoSettings):
        self.key = key
        self.settings = settings

    @property
    def decode_mode(self) -> DecodeMode:
        return self.settings.decode_mode

    def encrypt(self, plaintext: str) -> EncryptedField:
        """Encrypt a value for the X_encrypted/X_iv columns."""
        return encrypt_field(plaintext, self.key)

    def decrypt(self, ciphertext: str, iv: str) -> str:
        """Strict decrypt; raises DecryptionError on any failure."""
        return decrypt_field(EncryptedField(ciphertext=ciphertext, iv=iv), self.key)

    def decode(self, ciphertext: str | None, iv: str | None, field: str | None = None) -> DecodeResult:
        return safe_decode(ciphertext, iv, self.key, self.decode_mode, field)

    def encrypt_packed(self, plaintext: str) -> str:
        return encrypt_packed(plaintext, self.key)

    def decode_packed(self, packed: str | None, field: str | None = None) -> DecodeResult:
        return safe_decrypt_packed(packed, self.key, self.decode_mode, field)

    def encrypt_record(self, record: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
        return encrypt_record(record, fields, self.key)

    def decode_record(self, row: Mapping[str, Any], fields: Iterable[str]) -> dict[str, DecodeResult]:
        return decode_record(row, fields, self.key, self.decode_mode)

    @staticmethod
    def hash(value: str | bytes) -> str:
        return hash_value(value)

    @staticmethod
    def hash_email(email: str) -> str:
        return hash_email(email)

    @staticmethod
    def matches(value: str | bytes, digest: str | None) -> bool:
        return matches_hash(value, digest)


def initialize_encryption(settings: CryptoSettings | None = None) -> FieldCrypto:
    """Build the FieldCrypto used for the life of the process."""
    if settings is None:
        settings = load_crypto_settings()
    configure_crypto_logging(settings.log_dir)
    configure_metrics(settings.metrics_enabled)
    return FieldCrypto(derive_key(settings.secret), settings)


__all__ = ["FieldCrypto", "initialize_encryption"]
