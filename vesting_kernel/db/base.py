"""
Declarative base shared by every vesting table.

Rows are keyed by a uuid4 stored as text so the same schema runs on
SQLite and PostgreSQL.  Plain ``int`` annotations become BIGINT, which
covers unix-second timestamps and sequence numbers.  Token amounts are
NOT plain ints: they exceed 64 bits and use ``TokenAmount`` from
``db/types.py`` instead.

Nothing in this module may import from models/, services/ or selectors/.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from vesting_kernel.db.types import UTCDateTime


class UUIDString(TypeDecorator):
    """uuid.UUID in Python, VARCHAR(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        PyUUID: UUIDString(),
        datetime: UTCDateTime(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


UUID = PyUUID
