"""
DATA ENCRYPTION AT REST
=======================
AES-256-GCM helpers for encrypting/decrypting bytes before storage.

FLOW:
- encrypt_bytes() encrypts raw bytes -> (ciphertext, iv) base64 text pair.
- decrypt_bytes() verifies the tag and returns the plaintext bytes.

WHY:
- Protects data if the database is compromised.

HOW:
- Uses AES-256-GCM with a random 96-bit nonce per value and a 128-bit tag.
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from FieldSecurity.errors import DecryptionError, EncryptionError
from FieldSecurity.key_management import KEY_LENGTH, DerivedKey


NONCE_SIZE = 12
TAG_SIZE = 16


def _key_bytes(key: DerivedKey, error: type[Exception]) -> bytes:
    material = getattr(key, "material", None)
    if not isinstance(material, bytes) or len(material) != KEY_LENGTH:
        raise error("AES-256 key must be 32 bytes")
    return material


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode_strict(text: str, what: str) -> bytes:
    """Decode canonical standard base64 or raise DecryptionError."""
    if not isinstance(text, str) or not text:
        raise DecryptionError(f"{what} is missing")
    try:
        raw = base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError):
        raise DecryptionError(f"{what} is not valid base64") from None
    # Non-canonical padding bits would decode to the same bytes.
    if b64encode(raw) != text:
        raise DecryptionError(f"{what} is not canonical base64")
    return raw


def encrypt_bytes(plaintext: bytes, key: DerivedKey) -> tuple[str, str]:
    """Encrypt bytes with AES-256-GCM. Returns (ciphertext, iv) as base64."""
    aesgcm = AESGCM(_key_bytes(key, EncryptionError))
    nonce = os.urandom(NONCE_SIZE)
    try:
        ciphertext = aesgcm.encrypt(nonce, plaintext, None)
    except (TypeError, ValueError, OverflowError) as exc:
        raise EncryptionError("AES-GCM encryption failed") from exc
    return b64encode(ciphertext), b64encode(nonce)


def decrypt_bytes(ciphertext: str, iv: str, key: DerivedKey) -> bytes:
    aesgcm = AESGCM(_key_bytes(key, DecryptionError))
    nonce = b64decode_strict(iv, "iv")
    if len(nonce) != NONCE_SIZE:
        raise DecryptionError("iv must be 12 bytes")
    data = b64decode_strict(ciphertext, "ciphertext")
    if len(data) < TAG_SIZE:
        raise DecryptionError("ciphertext is shorter than the authentication tag")
    try:
        return aesgcm.decrypt(nonce, data, None)
    except InvalidTag:
        raise DecryptionError("authentication failed") from None
