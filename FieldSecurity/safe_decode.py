"""
SAFE FIELD DECODE
=================
Read path that tolerates seeded placeholder values and damaged rows.

FLOW:
- safe_decode() returns a DecodeResult tagged with how the value was obtained.
- safe_decrypt_packed() does the same for single-column "<iv>.<ciphertext>".
- decode_record() applies safe_decode to every X_encrypted/X_iv pair of a row.

WHY:
- Seed rows hold "enc_Dra_Maria_Garcia" style placeholders, never ciphertext.
- A list view must not fail because one field is unreadable.

HOW:
- Ordered checks: absent, placeholder, decrypt, raw fallback.
- In STRICT mode the raw fallback raises DecryptionError instead.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from FieldSecurity.activity_logging import get_crypto_logger
from FieldSecurity.errors import DecryptionError
from FieldSecurity.field_level_encryption import (
    PACKED_SEPARATOR,
    EncryptedField,
    decrypt_field,
    encrypted_column,
    iv_column,
    split_packed,
)
from FieldSecurity.key_management import DerivedKey
from FieldSecurity.metrics import increment_decode
from FieldSecurity.security_config import DecodeMode


PLACEHOLDER_PREFIX = "enc_"
PLACEHOLDER_SEPARATOR = "_"

_PACKED_IV = re.compile(r"[A-Za-z0-9+/]{16}")


class DecodeStatus(str, enum.Enum):
    ABSENT = "absent"
    PLACEHOLDER = "placeholder"
    DECRYPTED = "decrypted"
    RAW = "raw"


@dataclass(frozen=True)
class DecodeResult:
    value: str | None
    status: DecodeStatus

    @property
    def degraded(self) -> bool:
        """True when the value is stored text that could not be decrypted."""
        return self.status is DecodeStatus.RAW


def encode_placeholder(value: str) -> str:
    """Seed-data encoding. Normal write paths must use encrypt_field()."""
    return PLACEHOLDER_PREFIX + value.replace(" ", PLACEHOLDER_SEPARATOR)


def is_placeholder(value: str | None) -> bool:
    return isinstance(value, str) and value.startswith(PLACEHOLDER_PREFIX)


def decode_placeholder(value: str) -> str:
    return value[len(PLACEHOLDER_PREFIX):].replace(PLACEHOLDER_SEPARATOR, " ")


def _finish(result: DecodeResult) -> DecodeResult:
    increment_decode(result.status.value)
    return result


def _fallback(
    stored: str,
    reason: str,
    key: DerivedKey,
    mode: DecodeMode,
    field: str | None,
    cause: DecryptionError | None = None,
) -> DecodeResult:
    if mode is DecodeMode.STRICT:
        increment_decode("rejected")
        if cause is not None:
            raise cause
        raise DecryptionError(reason)
    get_crypto_logger().warning(
        "degraded field read field=%s reason=%s key=%s",
        field or "-",
        reason,
        getattr(key, "fingerprint", "-"),
    )
    return _finish(DecodeResult(stored, DecodeStatus.RAW))


def safe_decode(
    ciphertext: str | None,
    iv: str | None,
    key: DerivedKey,
    mode: DecodeMode = DecodeMode.DEGRADE,
    field: str | None = None,
) -> DecodeResult:
    """Decode a stored X_encrypted/X_iv pair.

    Placeholder detection runs before any decryption attempt, so a seeded
    value decodes the same way whatever iv or key is supplied. ``field`` is
    only used to label log lines.
    """
    if ciphertext is None or ciphertext == "":
        return _finish(DecodeResult(None, DecodeStatus.ABSENT))

    if is_placeholder(ciphertext):
        return _finish(DecodeResult(decode_placeholder(ciphertext), DecodeStatus.PLACEHOLDER))

    if not iv:
        return _fallback(ciphertext, "missing iv", key, mode, field)

    try:
        plaintext = decrypt_field(EncryptedField(ciphertext=ciphertext, iv=iv), key)
    except DecryptionError as exc:
        return _fallback(ciphertext, str(exc), key, mode, field, exc)
    return _finish(DecodeResult(plaintext, DecodeStatus.DECRYPTED))


def safe_decode_value(
    ciphertext: str | None,
    iv: str | None,
    key: DerivedKey,
    mode: DecodeMode = DecodeMode.DEGRADE,
    field: str | None = None,
) -> str | None:
    return safe_decode(ciphertext, iv, key, mode, field).value


def safe_decrypt_packed(
    packed: str | None,
    key: DerivedKey,
    mode: DecodeMode = DecodeMode.DEGRADE,
    field: str | None = None,
) -> DecodeResult:
    """Decode a single-column "<iv>.<ciphertext>" value.

    Placeholders are decoded first. Values without a separator are treated
    as plaintext, and so are values whose iv part is not a 16-character
    base64 nonce, e.g. emails or JSON stored before the column was encrypted.
    """
    if packed is None or packed == "":
        return _finish(DecodeResult(None, DecodeStatus.ABSENT))

    if is_placeholder(packed):
        return _finish(DecodeResult(decode_placeholder(packed), DecodeStatus.PLACEHOLDER))

    if PACKED_SEPARATOR not in packed:
        return _finish(DecodeResult(packed, DecodeStatus.RAW))

    pair = split_packed(packed)
    if not _PACKED_IV.fullmatch(pair.iv):
        return _finish(DecodeResult(packed, DecodeStatus.RAW))

    try:
        plaintext = decrypt_field(pair, key)
    except DecryptionError as exc:
        return _fallback(packed, str(exc), key, mode, field, exc)
    return _finish(DecodeResult(plaintext, DecodeStatus.DECRYPTED))


def decode_record(
    row: Mapping[str, Any],
    fields: Iterable[str],
    key: DerivedKey,
    mode: DecodeMode = DecodeMode.DEGRADE,
) -> dict[str, DecodeResult]:
    return {
        name: safe_decode(
            row.get(encrypted_column(name)),
            row.get(iv_column(name)),
            key,
            mode,
            field=name,
        )
        for name in fields
    }
