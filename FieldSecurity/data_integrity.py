"""
DATA INTEGRITY
==============
SHA-256 digests used as search keys over encrypted columns.

FLOW:
- hash_value() returns a stable hash stored in X_hash columns.
- matches_hash() compares a presented value with a stored digest.

WHY:
- Lookups like "find patient by access code" run before the caller is
  authenticated, so they cannot depend on the encryption key.

HOW:
- Computes an unkeyed SHA-256 hex digest of the UTF-8 input.
"""

from __future__ import annotations

import hashlib
import hmac


DIGEST_LENGTH = 64


def hash_value(data: str | bytes) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    elif not isinstance(data, bytes):
        raise TypeError(f"hash_value expects str or bytes, got {type(data).__name__}")
    return hashlib.sha256(data).hexdigest()


def hash_email(email: str) -> str:
    return hash_value(email.lower())


def matches_hash(value: str | bytes, digest: str | None) -> bool:
    if not digest:
        return False
    return hmac.compare_digest(hash_value(value), digest)
