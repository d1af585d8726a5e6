"""
TokenLedgerService -- the reference fixed-supply token ledger.

Responsibility:
    Balances, allowances, transfers and the one-time initial mint of a
    fixed-supply fungible token.  LedgerValueMover adapts it to the
    kernel's ValueLedger interface so that value movement happens in the
    same database transaction as grant bookkeeping.

Architecture position:
    Kernel > Services -- imperative shell.  The vesting services never
    import this module; they see only ValueLedger.

Invariants enforced:
    - Conservation: transfers are zero-sum; the sum of balances always
      equals the minted total supply.
    - Minting happens exactly once and must allocate the whole supply.
    - All checks run before any balance or allowance is modified.

Failure modes:
    - InsufficientBalanceError / InsufficientAllowanceError.
    - SupplyAlreadyMintedError / InvalidSupplyAllocationError.
    - InvalidAmountError for negative or non-integer amounts.
    - InvalidIdentityError for null holders.
"""

from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from vesting_kernel.domain.clock import Clock, SystemClock
from vesting_kernel.domain.identity import canonical_identity, require_identity
from vesting_kernel.domain.value_ledger import DEFAULT_HOLDING_ACCOUNT, ValueLedger
from vesting_kernel.exceptions import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidSupplyAllocationError,
    SupplyAlreadyMintedError,
)
from vesting_kernel.logging_config import get_logger
from vesting_kernel.models.token import TokenAccount, TokenAllowance, TokenSupply
from vesting_kernel.services.base import BaseService

logger = get_logger("services.token_ledger")

DEFAULT_TOTAL_SUPPLY = 1_000_000_000 * 10**18
DEFAULT_SYMBOL = "VEST"


def _require_amount(amount: int, *, allow_zero: bool = True) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(amount, "amount must be an integer number of token units")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmountError(amount, "amount must not be negative")
    return amount


class TokenLedgerService(BaseService[TokenAccount]):
    """
    Fixed-supply token ledger.

    Contract:
        Flush-only.  Every mutating method either applies its full effect
        or raises before touching any row.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        total_supply: int = DEFAULT_TOTAL_SUPPLY,
        symbol: str = DEFAULT_SYMBOL,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._configured_supply = total_supply
        self._symbol = symbol

    # ------------------------------------------------------------------
    # Row access
    # ------------------------------------------------------------------

    def _account(self, holder: str, *, create: bool = False) -> TokenAccount | None:
        account = self.session.execute(
            select(TokenAccount)
            .where(TokenAccount.holder == holder)
            .with_for_update()
        ).scalar_one_or_none()
        if account is None and create:
            account = TokenAccount(holder=holder, balance=0)
            self.session.add(account)
        return account

    def _allowance_row(self, owner: str, spender: str) -> TokenAllowance | None:
        return self.session.execute(
            select(TokenAllowance)
            .where(TokenAllowance.owner == owner, TokenAllowance.spender == spender)
            .with_for_update()
        ).scalar_one_or_none()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def symbol(self) -> str:
        return self._symbol

    def total_supply(self) -> int:
        """Minted supply, or 0 before the initial mint."""
        supply = self.session.execute(
            select(TokenSupply).where(TokenSupply.name == TokenSupply.DEFAULT_NAME)
        ).scalar_one_or_none()
        return supply.total_supply if supply else 0

    def balance_of(self, holder: str) -> int:
        holder = canonical_identity(holder)
        account = self.session.execute(
            select(TokenAccount).where(TokenAccount.holder == holder)
        ).scalar_one_or_none()
        return account.balance if account else 0

    def allowance(self, owner: str, spender: str) -> int:
        owner, spender = canonical_identity(owner), canonical_identity(spender)
        row = self.session.execute(
            select(TokenAllowance)
            .where(TokenAllowance.owner == owner, TokenAllowance.spender == spender)
        ).scalar_one_or_none()
        return row.amount if row else 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def mint_initial_supply(self, allocations: Mapping[str, int]) -> int:
        """
        Mint the whole configured supply to the given holders, once.

        Raises:
            SupplyAlreadyMintedError: a supply row already exists.
            InvalidSupplyAllocationError: allocations do not sum to the
                configured total supply.
        """
        existing = self.total_supply()
        if existing:
            raise SupplyAlreadyMintedError(existing)

        normalized = {
            require_identity(holder, role="holder"): _require_amount(amount, allow_zero=False)
            for holder, amount in allocations.items()
        }
        allocated = sum(normalized.values())
        if allocated != self._configured_supply:
            raise InvalidSupplyAllocationError(self._configured_supply, allocated)

        with self.session.begin_nested():
            self.session.add(
                TokenSupply(
                    symbol=self._symbol,
                    total_supply=self._configured_supply,
                    minted_at=self._clock.now_utc(),
                )
            )
            for holder, amount in normalized.items():
                account = self._account(holder, create=True)
                account.balance = account.balance + amount
            self.session.flush()

        logger.info(
            "token_supply_minted",
            extra={
                "symbol": self._symbol,
                "total_supply": str(self._configured_supply),
                "holder_count": len(normalized),
            },
        )
        return self._configured_supply

    def _move(self, source: str, destination: str, amount: int) -> None:
        source_account = self._account(source)
        balance = source_account.balance if source_account else 0
        if balance < amount:
            raise InsufficientBalanceError(source, balance, amount)
        if amount == 0 or source == destination:
            return
        destination_account = self._account(destination, create=True)
        source_account.balance = balance - amount
        destination_account.balance = destination_account.balance + amount
        self.session.flush()

    def transfer(self, source: str, destination: str, amount: int) -> bool:
        """Move amount from source's own balance to destination."""
        source = require_identity(source, role="source")
        destination = require_identity(destination, role="destination")
        _require_amount(amount)

        self._move(source, destination, amount)
        logger.debug(
            "token_transferred",
            extra={"source": source, "destination": destination, "amount": str(amount)},
        )
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set (not add to) spender's allowance over owner's balance."""
        owner = require_identity(owner, role="owner")
        spender = require_identity(spender, role="spender")
        _require_amount(amount)

        row = self._allowance_row(owner, spender)
        if row is None:
            row = TokenAllowance(owner=owner, spender=spender, amount=amount)
            self.session.add(row)
        else:
            row.amount = amount
        self.session.flush()
        logger.debug(
            "token_allowance_set",
            extra={"owner": owner, "spender": spender, "amount": str(amount)},
        )
        return True

    def transfer_from(self, spender: str, owner: str, destination: str, amount: int) -> bool:
        """
        Move amount out of owner's balance on spender's authority.

        Raises:
            InsufficientAllowanceError: allowance(owner, spender) < amount.
            InsufficientBalanceError: balance_of(owner) < amount.
        """
        spender = require_identity(spender, role="spender")
        owner = require_identity(owner, role="owner")
        destination = require_identity(destination, role="destination")
        _require_amount(amount)

        row = self._allowance_row(owner, spender)
        allowed = row.amount if row else 0
        if allowed < amount:
            raise InsufficientAllowanceError(owner, spender, allowed, amount)

        self._move(owner, destination, amount)
        if amount:
            row.amount = allowed - amount
            self.session.flush()
        logger.debug(
            "token_transferred_from",
            extra={
                "spender": spender,
                "owner": owner,
                "destination": destination,
                "amount": str(amount),
            },
        )
        return True


class LedgerValueMover(ValueLedger):
    """
    ValueLedger adapter over TokenLedgerService.

    Moves out of the operator account are plain transfers; moves out of
    any other account are transfer_from calls that spend the allowance
    the source granted the operator.  Refusals return False.
    """

    def __init__(self, ledger: TokenLedgerService, operator: str = DEFAULT_HOLDING_ACCOUNT):
        self._ledger = ledger
        self._operator = operator

    @property
    def operator(self) -> str:
        return self._operator

    def move_value(self, source: str, destination: str, amount: int) -> bool:
        try:
            if source == self._operator:
                return self._ledger.transfer(source, destination, amount)
            return self._ledger.transfer_from(self._operator, source, destination, amount)
        except (InsufficientBalanceError, InsufficientAllowanceError) as exc:
            logger.warning(
                "value_move_refused",
                extra={
                    "source": source,
                    "destination": destination,
                    "amount": str(amount),
                    "refusal_code": exc.code,
                },
            )
            return False
