"""
CRYPTO METRICS
==============
Prometheus-backed counters for the field encryption layer.
"""

from __future__ import annotations

import os
from typing import Dict

from prometheus_client import REGISTRY, Counter


FIELD_DECODES = Counter(
    "field_decode_total",
    "Field reads by decode outcome",
    ["status"],
)
FIELD_CRYPTO_ERRORS = Counter(
    "field_crypto_errors_total",
    "Failed field encrypt/decrypt operations",
    ["operation"],
)

_ENABLED: bool | None = None


def _enabled() -> bool:
    if _ENABLED is not None:
        return _ENABLED
    return os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"


def configure_metrics(enabled: bool) -> None:
    global _ENABLED
    _ENABLED = enabled


def increment_decode(status: str) -> None:
    if _enabled():
        FIELD_DECODES.labels(status=status).inc()


def increment_crypto_error(operation: str) -> None:
    if _enabled():
        FIELD_CRYPTO_ERRORS.labels(operation=operation).inc()


def get_decode_metrics_snapshot(statuses: list[str]) -> Dict[str, int]:
    snapshot: Dict[str, int] = {}
    for status in statuses:
        value = REGISTRY.get_sample_value("field_decode_total", {"status": status})
        snapshot[status] = int(value or 0)
    return snapshot
