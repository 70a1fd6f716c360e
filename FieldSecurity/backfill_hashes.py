from __future__ import annotations

from typing import Callable, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from FieldSecurity.activity_logging import get_crypto_logger
from FieldSecurity.data_integrity import hash_value
from FieldSecurity.encrypted_type import hash_column, load_decrypted
from FieldSecurity.key_management import DerivedKey


def _set_hash(obj, field: str, key: DerivedKey, hasher: Callable[[str], str]) -> bool:
    decoded = load_decrypted(obj, field, key)
    if decoded.degraded:
        return False
    new_value = hasher(decoded.value) if decoded.value is not None else None
    column = hash_column(field)
    if getattr(obj, column) != new_value:
        setattr(obj, column, new_value)
        return True
    return False


def backfill_hashes(
    session: Session,
    model,
    fields: Iterable[str],
    key: DerivedKey,
    hasher: Callable[[str], str] = hash_value,
) -> int:
    """Recompute X_hash for every row of ``model``; returns rows changed.

    Rows whose field cannot be decrypted keep their current hash. Pass
    ``hasher=hash_email`` for columns searched case-insensitively.
    The caller owns the transaction.
    """
    fields = list(fields)
    updated = 0
    for obj in session.scalars(select(model)):
        changed = False
        for field in fields:
            changed |= _set_hash(obj, field, key, hasher)
        if changed:
            updated += 1
    session.flush()
    get_crypto_logger().info(
        "hash backfill complete model=%s fields=%s updated=%s",
        model.__name__,
        ",".join(fields),
        updated,
    )
    return updated
