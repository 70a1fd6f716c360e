"""
FIELD CRYPTO ERRORS
===================
Exception types raised by the field-level encryption layer.
"""

from __future__ import annotations


class FieldCryptoError(Exception):
    """Base class for every error raised by FieldSecurity."""


class ConfigurationError(FieldCryptoError):
    """Operator configuration is missing or unsafe for the environment."""


class KeyDerivationError(FieldCryptoError):
    """The operator secret cannot be turned into a key."""


class EncryptionError(FieldCryptoError):
    """A value could not be encrypted. The record write must be aborted."""


class DecryptionError(FieldCryptoError):
    """Stored ciphertext is malformed, tampered with, or from another key."""
