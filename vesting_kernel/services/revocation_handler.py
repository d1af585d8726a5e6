"""
RevocationHandler -- active -> revoked, unreleased balance back to the issuer.

Responsibility:
    Terminates a revocable grant on the issuer's request.  What has
    already been released stays with the beneficiary; everything else
    returns to the issuer.  Accrual is not consulted: vested but
    unreleased value is forfeited.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - REVOCATION_FINAL: active is cleared and flushed before any value
      moves; later release/revoke fail with GrantInactiveError.
    - released_amount is untouched.

Failure modes (checked in this order):
    - InvalidIdentityError: null account.
    - GrantNotFoundError / GrantInactiveError.
    - GrantNotRevocableError: grant was created non-revocable.
    - UnauthorizedError: caller is not the recorded issuer.
    - SystemPausedError: pause switch is on.
    - ValueTransferError: the ledger refused; the savepoint rolls the
      revocation back.
"""

from sqlalchemy.orm import Session

from vesting_kernel.domain.access import AccessGate
from vesting_kernel.domain.clock import Clock, SystemClock
from vesting_kernel.domain.dtos import RevocationResult
from vesting_kernel.domain.identity import canonical_identity, require_identity
from vesting_kernel.domain.value_ledger import DEFAULT_HOLDING_ACCOUNT, ValueLedger
from vesting_kernel.exceptions import (
    GrantInactiveError,
    GrantNotFoundError,
    GrantNotRevocableError,
    SystemPausedError,
    UnauthorizedError,
    ValueTransferError,
)
from vesting_kernel.logging_config import get_logger
from vesting_kernel.models.grant import VestingGrant
from vesting_kernel.services.base import BaseService, load_current_grant
from vesting_kernel.services.event_recorder import EventRecorder

logger = get_logger("services.revocation")


class RevocationHandler(BaseService[VestingGrant]):
    """
    Executes revocations.

    Guarantees:
        - Runs inside its own SAVEPOINT: all or nothing.
        - The issuer receives exactly granted_amount - released_amount.

    Non-goals:
        - Does NOT consult the authorized-issuer set; only the recorded
          issuer may revoke, authorized or not.
    """

    def __init__(
        self,
        session: Session,
        access_gate: AccessGate,
        value_ledger: ValueLedger,
        clock: Clock | None = None,
        holding_account: str = DEFAULT_HOLDING_ACCOUNT,
        event_recorder: EventRecorder | None = None,
    ):
        super().__init__(session)
        self._gate = access_gate
        self._ledger = value_ledger
        self._clock = clock or SystemClock()
        self._holding_account = holding_account
        self._events = event_recorder or EventRecorder(session, self._clock)

    def revoke(self, caller: str, account: str) -> RevocationResult:
        """Revoke account's grant on behalf of caller."""
        beneficiary = require_identity(account)
        caller = canonical_identity(caller)

        with self.session.begin_nested():
            grant = load_current_grant(self.session, beneficiary, for_update=True)
            if grant is None:
                raise GrantNotFoundError(beneficiary)
            if not grant.active:
                raise GrantInactiveError(beneficiary, str(grant.id))
            if not grant.revocable:
                raise GrantNotRevocableError(beneficiary, str(grant.id))
            if caller != grant.issuer:
                logger.warning(
                    "revoke_denied",
                    extra={"caller": caller, "beneficiary": beneficiary},
                )
                raise UnauthorizedError(
                    caller, "revoke", reason="only the issuing identity may revoke"
                )
            if self._gate.is_paused():
                raise SystemPausedError("revoke")

            unreleased = grant.remaining_amount
            now = self._clock.timestamp()

            # INVARIANT: REVOCATION_FINAL -- flush before the ledger call
            grant.active = False
            grant.revoked_at = self._clock.now_utc()
            self.session.flush()

            self._events.record_revoke(grant, unreleased)

            if unreleased > 0:
                if not self._ledger.move_value(self._holding_account, grant.issuer, unreleased):
                    raise ValueTransferError(self._holding_account, grant.issuer, unreleased)

        logger.info(
            "grant_revoked",
            extra={
                "beneficiary": beneficiary,
                "issuer": grant.issuer,
                "returned_amount": str(unreleased),
                "released_amount": str(grant.released_amount),
            },
        )
        return RevocationResult(
            beneficiary=beneficiary,
            issuer=grant.issuer,
            returned_amount=unreleased,
            released_amount=grant.released_amount,
            revoked_at=now,
            grant_id=grant.id,
        )
