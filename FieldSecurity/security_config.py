"""
CRYPTO CONFIG
=============
Operator settings for field encryption, loaded once from environment.
"""

# FLOW:
# - Load the active .env file, read env vars, return CryptoSettings.
# - The bootstrap passes CryptoSettings to key derivation explicitly.
# WHY:
# - Call sites never read ENCRYPTION_SECRET themselves.
# HOW:
# - dotenv + os.getenv helpers; fallback secret allowed in dev only.

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Mapping

import dotenv

from FieldSecurity.errors import ConfigurationError


FALLBACK_SECRET = "default-secret-change-in-production"
DEVELOPMENT_ENVIRONMENTS = {"dev", "development", "local", "localhost", "test"}


class DecodeMode(str, enum.Enum):
    DEGRADE = "degrade"
    STRICT = "strict"


def get_bool(name: str, default: bool = False, environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return str(env.get(name, str(default))).lower() == "true"


def env_file_for(app_env: str) -> str:
    """Name of the .env file holding settings for ``app_env``."""
    if app_env.strip().lower() in DEVELOPMENT_ENVIRONMENTS | {""}:
        return ".env.localhost"
    return ".env.production"


@dataclass(frozen=True)
class CryptoSettings:
    secret: str
    environment: str = "development"
    decode_mode: DecodeMode = DecodeMode.DEGRADE
    log_dir: str | None = None
    metrics_enabled: bool = True

    @property
    def is_development(self) -> bool:
        return self.environment in DEVELOPMENT_ENVIRONMENTS

    def __repr__(self) -> str:
        return (
            f"CryptoSettings(environment={self.environment!r}, "
            f"decode_mode={self.decode_mode.value!r}, log_dir={self.log_dir!r}, "
            f"metrics_enabled={self.metrics_enabled!r})"
        )


def parse_decode_mode(raw: str | None) -> DecodeMode:
    value = (raw or DecodeMode.DEGRADE.value).strip().lower()
    try:
        return DecodeMode(value)
    except ValueError:
        raise ConfigurationError(
            f"FIELD_DECODE_MODE must be 'degrade' or 'strict', got {raw!r}"
        ) from None


def load_crypto_settings(environ: Mapping[str, str] | None = None) -> CryptoSettings:
    """Build CryptoSettings from the environment.

    When ``environ`` is omitted the active .env file is loaded first and
    ``os.environ`` is read. The fallback secret is only accepted for
    development environments; anywhere else a missing secret is fatal.
    """
    if environ is None:
        root = os.path.dirname(os.path.dirname(__file__))
        dotenv.load_dotenv(os.path.join(root, env_file_for(os.getenv("APP_ENV", ""))))
        environ = os.environ

    environment = (environ.get("APP_ENV") or "development").strip().lower()
    secret = environ.get("ENCRYPTION_SECRET") or ""

    if not secret or secret == FALLBACK_SECRET:
        if environment not in DEVELOPMENT_ENVIRONMENTS:
            raise ConfigurationError(
                f"ENCRYPTION_SECRET must be set to a real secret when APP_ENV={environment!r}"
            )
        logging.getLogger("security.crypto").warning(
            "ENCRYPTION_SECRET not set; using development fallback secret"
        )
        secret = FALLBACK_SECRET

    return CryptoSettings(
        secret=secret,
        environment=environment,
        decode_mode=parse_decode_mode(environ.get("FIELD_DECODE_MODE")),
        log_dir=environ.get("SECURITY_LOG_DIR") or None,
        metrics_enabled=get_bool("PROMETHEUS_ENABLED", True, environ),
    )
