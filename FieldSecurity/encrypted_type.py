"""
ENCRYPTED SQLALCHEMY COLUMNS
============================
Storage convention for encrypted and searchable fields on mapped models.
"""

# FLOW:
# - store_encrypted()/load_decrypted() use the X_encrypted + X_iv columns.
# - store_hash() fills the X_hash column used for equality lookups.
# - EncryptedString keeps "<iv>.<ciphertext>" in a single column.
# WHY:
# - Route handlers share one read/write path for sensitive columns.
# HOW:
# - Attribute helpers on mapped objects plus a TypeDecorator.

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from FieldSecurity.data_integrity import hash_value
from FieldSecurity.field_level_encryption import (
    encrypt_field,
    encrypt_packed,
    encrypted_column,
    iv_column,
)
from FieldSecurity.key_management import DerivedKey
from FieldSecurity.safe_decode import DecodeResult, safe_decode, safe_decrypt_packed
from FieldSecurity.security_config import DecodeMode


HASH_SUFFIX = "_hash"


def hash_column(field: str) -> str:
    return f"{field}{HASH_SUFFIX}"


def store_encrypted(obj: Any, field: str, value: str | None, key: DerivedKey) -> None:
    if value is None:
        setattr(obj, encrypted_column(field), None)
        setattr(obj, iv_column(field), None)
        return
    encrypted = encrypt_field(value, key)
    setattr(obj, encrypted_column(field), encrypted.ciphertext)
    setattr(obj, iv_column(field), encrypted.iv)


def load_decrypted(
    obj: Any,
    field: str,
    key: DerivedKey,
    mode: DecodeMode = DecodeMode.DEGRADE,
) -> DecodeResult:
    return safe_decode(
        getattr(obj, encrypted_column(field), None),
        getattr(obj, iv_column(field), None),
        key,
        mode,
        field=f"{type(obj).__name__}.{field}",
    )


def store_hash(obj: Any, field: str, value: str | None, column: str | None = None) -> None:
    setattr(obj, column or hash_column(field), hash_value(value) if value is not None else None)


class EncryptedString(TypeDecorator):
    """Single-column encrypted string.

    ``key_provider`` is called on every bind/load so the key stays owned by
    the bootstrap rather than by the column definition.
    """

    impl = Text
    cache_ok = True

    def __init__(
        self,
        key_provider: Callable[[], DerivedKey],
        mode: DecodeMode = DecodeMode.DEGRADE,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.key_provider = key_provider
        self.mode = mode

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return encrypt_packed(value, self.key_provider())

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return safe_decrypt_packed(value, self.key_provider(), self.mode).value
