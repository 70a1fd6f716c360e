"""
SENSITIVE DATA PROTECTION
=========================
Field-level AES-256-GCM encryption for strings.
"""

# FLOW:
# - encrypt_field()/decrypt_field() call AES helpers for single values.
# - encrypt_packed()/decrypt_packed() keep iv and ciphertext in one column.
# - encrypt_record() prepares ETL rows for the X_encrypted/X_iv convention.
# WHY:
# - Protects individual columns without encrypting whole rows.
# HOW:
# - Wraps AES helper functions for string values.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from FieldSecurity.data_encryption_at_rest import decrypt_bytes, encrypt_bytes
from FieldSecurity.errors import DecryptionError, EncryptionError
from FieldSecurity.key_management import DerivedKey
from FieldSecurity.metrics import increment_crypto_error


ENCRYPTED_SUFFIX = "_encrypted"
IV_SUFFIX = "_iv"
PACKED_SEPARATOR = "."


@dataclass(frozen=True)
class EncryptedField:
    ciphertext: str
    iv: str


def encrypted_column(field: str) -> str:
    return f"{field}{ENCRYPTED_SUFFIX}"


def iv_column(field: str) -> str:
    return f"{field}{IV_SUFFIX}"


def encrypt_field(plaintext: str, key: DerivedKey) -> EncryptedField:
    if not isinstance(plaintext, str):
        raise EncryptionError("Only string values can be encrypted")
    try:
        ciphertext, iv = encrypt_bytes(plaintext.encode("utf-8"), key)
    except EncryptionError:
        increment_crypto_error("encrypt")
        raise
    return EncryptedField(ciphertext=ciphertext, iv=iv)


def decrypt_field(field: EncryptedField, key: DerivedKey) -> str:
    try:
        plaintext = decrypt_bytes(field.ciphertext, field.iv, key)
        return plaintext.decode("utf-8")
    except UnicodeDecodeError:
        increment_crypto_error("decrypt")
        raise DecryptionError("plaintext is not valid UTF-8") from None
    except DecryptionError:
        increment_crypto_error("decrypt")
        raise


def encrypt_packed(plaintext: str, key: DerivedKey) -> str:
    """Encrypt into the single-column "<iv>.<ciphertext>" form."""
    field = encrypt_field(plaintext, key)
    return f"{field.iv}{PACKED_SEPARATOR}{field.ciphertext}"


def split_packed(packed: str) -> EncryptedField:
    iv, sep, ciphertext = packed.partition(PACKED_SEPARATOR)
    if not sep:
        raise DecryptionError("packed value has no iv separator")
    return EncryptedField(ciphertext=ciphertext, iv=iv)


def decrypt_packed(packed: str, key: DerivedKey) -> str:
    if not isinstance(packed, str):
        raise DecryptionError("packed value must be a string")
    return decrypt_field(split_packed(packed), key)


def encrypt_record(
    record: Mapping[str, Any], fields: Iterable[str], key: DerivedKey
) -> dict[str, Any]:
    """Return a copy of ``record`` ready for storage.

    Every listed non-null field, empty strings included, is replaced by its
    ``X_encrypted`` and ``X_iv`` siblings. Missing or null fields are left
    untouched.
    """
    result = dict(record)
    for name in fields:
        value = record.get(name)
        if value is None:
            continue
        encrypted = encrypt_field(str(value), key)
        result[encrypted_column(name)] = encrypted.ciphertext
        result[iv_column(name)] = encrypted.iv
        del result[name]
    return result


def encrypt_fields(
    record: Mapping[str, Any], fields: Iterable[str], key: DerivedKey
) -> tuple[dict[str, Any], list[tuple[str, str]]]:
    """Encrypt fields in place; return the record and its (field, iv) list."""
    result = dict(record)
    ivs: list[tuple[str, str]] = []
    for name in fields:
        if record.get(name) is None:
            continue
        encrypted = encrypt_field(str(record[name]), key)
        result[name] = encrypted.ciphertext
        ivs.append((name, encrypted.iv))
    return result, ivs


def decrypt_fields(
    record: Mapping[str, Any], ivs: Iterable[tuple[str, str]], key: DerivedKey
) -> dict[str, Any]:
    result = dict(record)
    for name, iv in ivs:
        if record.get(name) is None:
            continue
        result[name] = decrypt_field(EncryptedField(str(record[name]), iv), key)
    return result
