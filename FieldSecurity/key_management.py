"""
KEY DERIVATION
==============
Turn the operator secret into a 32-byte AES-256 key.
"""

# FLOW:
# - derive_key() runs PBKDF2-HMAC-SHA256 over the secret with a fixed salt.
# - Results are cached per secret for the life of the process.
# WHY:
# - Every process deriving from the same secret must read the same rows.
# HOW:
# - cryptography PBKDF2HMAC, 100k iterations, 32-byte output.

from __future__ import annotations

import functools
import hashlib
from dataclasses import dataclass, field

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from FieldSecurity.errors import KeyDerivationError


KEY_SALT = b"etl-encryption-salt"
KEY_ITERATIONS = 100_000
KEY_LENGTH = 32


@dataclass(frozen=True)
class DerivedKey:
    material: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.material, bytes) or len(self.material) != KEY_LENGTH:
            raise KeyDerivationError("AES-256 key must be 32 bytes")

    @property
    def fingerprint(self) -> str:
        """Short non-secret identifier, safe to log."""
        return hashlib.sha256(b"fingerprint:" + self.material).hexdigest()[:12]


def derive_key(secret: str) -> DerivedKey:
    if not isinstance(secret, str):
        raise KeyDerivationError("Secret must be a string")
    if not secret:
        raise KeyDerivationError("Secret must not be empty")
    return _derive_cached(secret)


@functools.lru_cache(maxsize=8)
def _derive_cached(secret: str) -> DerivedKey:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=KEY_SALT,
        iterations=KEY_ITERATIONS,
    )
    return DerivedKey(kdf.derive(secret.encode("utf-8")))
