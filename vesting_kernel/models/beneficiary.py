"""
Module: vesting_kernel.models.beneficiary
Responsibility: ORM persistence for the append-only beneficiary lookup list.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only: one entry per successful grant creation, never updated
      or deleted (ORM listener).
    - Not de-duplicated: a beneficiary granted, revoked and granted again
      appears twice.
    - seq is monotonically increasing and defines list order.
"""

from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from vesting_kernel.db.base import Base, UUIDString


class BeneficiaryLookupEntry(Base):
    """One position in the beneficiary lookup list."""

    __tablename__ = "beneficiary_lookup"

    seq: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        unique=True,
    )

    beneficiary: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
    )

    # The grant whose creation appended this entry
    grant_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("vesting_grants.id"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<BeneficiaryLookupEntry {self.seq}: {self.beneficiary}>"
