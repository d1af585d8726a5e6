"""Database layer - engine, base classes, column types, and immutability."""

from vesting_kernel.db.base import UUID, Base, UUIDString
from vesting_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from vesting_kernel.db.types import TokenAmount, UTCDateTime

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "UUIDString",
    "UUID",
    "TokenAmount",
    "UTCDateTime",
]
