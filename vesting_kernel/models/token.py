"""
Module: vesting_kernel.models.token
Responsibility: ORM persistence for the reference fungible-token ledger:
    supply, balances and allowances.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Sum of all TokenAccount.balance equals TokenSupply.total_supply
      (maintained by TokenLedgerService; transfers are zero-sum).
    - At most one TokenSupply row; minting happens exactly once.
    - At most one allowance row per (owner, spender).
"""

from datetime import datetime

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from vesting_kernel.db.base import Base
from vesting_kernel.db.types import TokenAmount, UTCDateTime


class TokenSupply(Base):
    """The one-time minted supply."""

    __tablename__ = "token_supply"

    DEFAULT_NAME = "default"

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        default=DEFAULT_NAME,
    )

    symbol: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    total_supply: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
    )

    minted_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )


class TokenAccount(Base):
    """Balance held by one identity."""

    __tablename__ = "token_accounts"

    holder: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
    )

    balance: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return f"<TokenAccount {self.holder}: {self.balance}>"


class TokenAllowance(Base):
    """Amount a spender may still move out of an owner's account."""

    __tablename__ = "token_allowances"

    __table_args__ = (
        UniqueConstraint("owner", "spender", name="uq_token_allowance_pair"),
    )

    owner: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    spender: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    amount: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
        default=0,
    )
