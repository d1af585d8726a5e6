"""
Hashing for the vesting notification chain.

Each VestingEvent stores two digests: one over its JSON payload and one
linking its key columns to the previous event's digest.  Both must be
reproducible from the stored row alone, so encoding is fixed here.
"""

import hashlib
import json
from datetime import date
from typing import Any
from uuid import UUID

GENESIS_MARKER = "GENESIS"


def _encode_extra(value: Any) -> Any:
    # datetime is a subclass of date
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    raise TypeError(f"cannot hash value of type {type(value).__name__}")


def canonicalize_json(data: Any) -> str:
    """
    Compact, key-sorted JSON text for ``data``.

    Pass token amounts as decimal strings: a 256-bit integer is valid
    JSON but many readers of the payload column would lose precision.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=_encode_extra,
    )


def _sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_payload(payload: dict) -> str:
    """64-char hex SHA-256 of the canonical payload."""
    return _sha256_hex(canonicalize_json(payload))


def hash_vesting_event(
    event_type: str,
    beneficiary: str,
    amount: int,
    grant_id: str,
    payload_hash: str,
    prev_hash: str | None,
) -> str:
    """
    Chain digest for one notification.

    Fields are joined with ``|`` in a fixed order; the first event in the
    chain links to the literal ``GENESIS`` instead of a previous digest.
    """
    link = prev_hash or GENESIS_MARKER
    return _sha256_hex(
        "|".join((event_type, beneficiary, str(amount), str(grant_id), payload_hash, link))
    )
