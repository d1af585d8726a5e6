"""
Module: vesting_kernel.models.authorization
Responsibility: ORM persistence for the reference access gate: the owner,
    the pause switch, and the authorized-issuer set.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Exactly one AccessControlState row (name = "default") once the gate
      has been initialized.  The owner never changes.
    - At most one AuthorizedIssuer row per identity.  Deauthorization
      flips is_authorized rather than deleting the row.

Audit relevance:
    updated_at records the last authorization or pause change.
"""

from datetime import datetime

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from vesting_kernel.db.base import Base
from vesting_kernel.db.types import UTCDateTime


class AccessControlState(Base):
    """Owner and pause switch."""

    __tablename__ = "access_control_state"

    DEFAULT_NAME = "default"

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        default=DEFAULT_NAME,
    )

    owner: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    paused: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AccessControlState owner={self.owner} paused={self.paused}>"


class AuthorizedIssuer(Base):
    """
    Membership of one identity in the authorized-issuer set.

    Contract:
        Mutated only by AccessControlService on behalf of the owner.
    """

    __tablename__ = "authorized_issuers"

    identity: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
    )

    is_authorized: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AuthorizedIssuer {self.identity} {self.is_authorized}>"
