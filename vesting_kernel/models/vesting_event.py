"""
Module: vesting_kernel.models.vesting_event
Responsibility: ORM persistence for the Grant / Release / Revoke
    notifications, stored as a tamper-evident hash chain.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only; no UPDATE or DELETE (ORM listener).
    - Hash chain integrity: hash = H(event_type | beneficiary | amount |
      payload_hash | prev_hash).  Validated by EventRecorder.
    - seq is monotonically increasing, allocated by SequenceService.

Failure modes:
    - ImmutabilityViolationError on any UPDATE/DELETE attempt.
    - EventChainBrokenError when chain validation detects a mismatch.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from vesting_kernel.db.base import Base, UUIDString
from vesting_kernel.db.types import TokenAmount, UTCDateTime


class VestingEventType(str, Enum):
    """Notification kinds emitted by the kernel."""

    GRANT = "grant"
    RELEASE = "release"
    REVOKE = "revoke"


class VestingEvent(Base):
    """
    One notification in the vesting hash chain.

    Contract:
        Rows are append-only.  Each row's hash includes the previous
        row's hash, creating a tamper-evident chain.

    Guarantees:
        - seq is unique and monotonically increasing.
        - prev_hash is None only for the genesis event.
        - issuer is None for RELEASE events.

    Non-goals:
        - Does NOT enforce hash correctness at INSERT time; that is the
          responsibility of EventRecorder.
    """

    __tablename__ = "vesting_events"

    __table_args__ = (
        Index("idx_vesting_event_beneficiary", "beneficiary"),
        Index("idx_vesting_event_type", "event_type"),
        Index("idx_vesting_event_grant", "grant_id"),
    )

    seq: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        unique=True,
    )

    # VestingEventType value
    event_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    issuer: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    beneficiary: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    # Grant: granted amount; Release: released now; Revoke: returned remainder
    amount: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
    )

    grant_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    payload: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )

    payload_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    prev_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<VestingEvent #{self.seq} {self.event_type} {self.beneficiary} {self.amount}>"

    @property
    def is_genesis(self) -> bool:
        return self.prev_hash is None
