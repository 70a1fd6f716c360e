"""
CRYPTO ERROR HANDLING
=====================
Return generic error messages when field encryption fails in a request.
"""

# FLOW:
# - Register handlers that turn FieldCryptoError into generic JSON.
# WHY:
# - Avoids leaking cryptographic detail or stored values to clients.
# HOW:
# - Logs the failure server-side and returns a fixed message.

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from FieldSecurity.activity_logging import get_crypto_logger
from FieldSecurity.errors import (
    ConfigurationError,
    DecryptionError,
    EncryptionError,
    FieldCryptoError,
    KeyDerivationError,
)
from FieldSecurity.secrets_redaction import redact


READ_FAILED = "Could not retrieve record"
WRITE_FAILED = "Could not save record"


def _detail_for(exc: FieldCryptoError) -> str:
    if isinstance(exc, DecryptionError):
        return READ_FAILED
    if isinstance(exc, (EncryptionError, KeyDerivationError, ConfigurationError)):
        return WRITE_FAILED
    return "An error occurred"


def register_crypto_error_handlers(app) -> None:
    @app.exception_handler(FieldCryptoError)
    async def field_crypto_exception_handler(request: Request, exc: FieldCryptoError):
        detail = _detail_for(exc)
        query = redact(request.url.query) if request.url.query else ""
        get_crypto_logger().error(
            "field crypto failure method=%s path=%s query=%s error=%s",
            request.method,
            request.url.path,
            query,
            type(exc).__name__,
        )
        return JSONResponse({"detail": detail}, status_code=500)
