"""
Module: vesting_kernel.models.grant
Responsibility: ORM persistence for vesting grants -- the schedule, the
    release progress, and the active/revoked lifecycle flag.
Architecture position: Kernel > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    RELEASE_CEILING     -- released_amount <= granted_amount (ORM listener).
    RELEASE_MONOTONIC   -- released_amount never decreases (ORM listener).
    SINGLE_ACTIVE_GRANT -- at most one active row per beneficiary (partial
                           unique index uq_vesting_grant_active_beneficiary).
    REVOCATION_FINAL    -- active never flips back to True; an inactive row
                           accepts no further changes (ORM listener).
    SCHEDULE_FROZEN     -- granted_amount, issuer, beneficiary, start_time,
                           cliff_time, end_time and revocable never change
                           after INSERT (ORM listener).

Failure modes:
    - ImmutabilityViolationError on any forbidden UPDATE or any DELETE.
    - IntegrityError if a second active grant for the same beneficiary is
      flushed.

Audit relevance:
    Revoked rows are never deleted; they remain as inert history.  A
    beneficiary may hold several rows over time (grant, revoke, grant
    again); the row with the highest grant_seq is the current one.
"""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from vesting_kernel.db.base import Base
from vesting_kernel.db.types import TokenAmount, UTCDateTime

# Columns that are frozen once the row has been inserted.
GRANT_FROZEN_FIELDS = (
    "grant_seq",
    "issuer",
    "beneficiary",
    "granted_amount",
    "start_time",
    "cliff_time",
    "end_time",
    "revocable",
    "created_at",
)


class VestingGrant(Base):
    """
    One vesting grant for one beneficiary.

    Contract:
        Created active by VestingRegistry.create_grant().  Mutated only by
        ReleaseCoordinator (released_amount) and RevocationHandler
        (active, revoked_at).

    Guarantees:
        - end_time - start_time spans at least one accrual period.
        - cliff_time in [start_time, end_time).
        - 0 <= released_amount <= granted_amount.

    Non-goals:
        - Does NOT compute vesting; see domain/accrual.py.
    """

    __tablename__ = "vesting_grants"

    __table_args__ = (
        Index(
            "uq_vesting_grant_active_beneficiary",
            "beneficiary",
            unique=True,
            sqlite_where=text("active = 1"),
            postgresql_where=text("active IS TRUE"),
        ),
        Index("idx_vesting_grant_beneficiary_seq", "beneficiary", "grant_seq"),
        Index("idx_vesting_grant_issuer", "issuer"),
    )

    # Allocation order across all grants
    grant_seq: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        unique=True,
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # Only this identity may revoke
    issuer: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    beneficiary: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    granted_amount: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
    )

    # Unix seconds
    start_time: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    cliff_time: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    end_time: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    revocable: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
    )

    released_amount: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
        default=0,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    revoked_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    def __repr__(self) -> str:
        state = "active" if self.active else "revoked"
        return (
            f"<VestingGrant #{self.grant_seq} {self.beneficiary} "
            f"{self.released_amount}/{self.granted_amount} {state}>"
        )

    @property
    def remaining_amount(self) -> int:
        """Granted but not yet released."""
        return self.granted_amount - self.released_amount
