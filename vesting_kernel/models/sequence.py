"""Named counter rows backing SequenceService."""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from vesting_kernel.db.base import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    # "vesting_grant", "beneficiary_lookup", "vesting_event"
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    # Last value handed out; 0 before the first allocation
    current_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
