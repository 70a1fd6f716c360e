"""
SECRETS REDACTION
=================
Utilities to keep secrets and sensitive values out of logs and listings.
"""

# FLOW:
# - redact() masks common secret patterns before logging.
# - mask_sensitive_data() hides all but the last characters of a value.
# WHY:
# - Prevents leaking credentials or PHI in logs.
# HOW:
# - Replaces sensitive values with ***.

from __future__ import annotations

import re


_SECRET_PATTERNS = [
    re.compile(r"(secret=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(token=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(key=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(iv=)([^&\s]+)", re.IGNORECASE),
]


def redact(value: str) -> str:
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(r"\1***", value)
    return value


def mask_sensitive_data(value: str, visible_chars: int = 4) -> str:
    if visible_chars <= 0 or len(value) <= visible_chars:
        return "*" * len(value)
    return "*" * (len(value) - visible_chars) + value[-visible_chars:]
