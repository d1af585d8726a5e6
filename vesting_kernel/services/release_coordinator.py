"""
ReleaseCoordinator -- compute accrual, record the release, move the value.

Responsibility:
    Releases the vested, unreleased portion of a beneficiary's grant to
    that beneficiary.  Callable by anyone; value always goes to the
    beneficiary on record.

Architecture position:
    Kernel > Services -- imperative shell.  Delegates arithmetic to
    domain/accrual.py and value movement to the ValueLedger capability.
    Also invoked by VestingRegistry for the eager release at grant time.

Invariants enforced:
    - RELEASE_CEILING / ACCRUAL_NON_NEGATIVE via compute_releasable().
    - STATE_BEFORE_TRANSFER: released_amount is incremented and flushed
      before move_value(), so a reentrant release observes it and
      computes zero.
    - Idempotence: a second release in the same accrual period is a
      zero-amount no-op with no state change and no value movement.

Failure modes:
    - InvalidIdentityError, GrantNotFoundError, GrantInactiveError.
    - BeforeCliffError: now < cliff_time.
    - ValueTransferError: the ledger refused; the savepoint rolls the
      increment back.
"""

from sqlalchemy.orm import Session

from vesting_kernel.domain.accrual import compute_releasable
from vesting_kernel.domain.clock import Clock, SystemClock
from vesting_kernel.domain.dtos import ReleaseResult
from vesting_kernel.domain.identity import require_identity
from vesting_kernel.domain.policy import VestingPolicy
from vesting_kernel.domain.schedule import GrantSchedule
from vesting_kernel.domain.value_ledger import DEFAULT_HOLDING_ACCOUNT, ValueLedger
from vesting_kernel.exceptions import (
    GrantInactiveError,
    GrantNotFoundError,
    ValueTransferError,
)
from vesting_kernel.logging_config import get_logger
from vesting_kernel.models.grant import VestingGrant
from vesting_kernel.services.base import BaseService, load_current_grant
from vesting_kernel.services.event_recorder import EventRecorder

logger = get_logger("services.release")


def schedule_of(grant: VestingGrant) -> GrantSchedule:
    """Pure schedule view of a grant row."""
    return GrantSchedule(
        granted_amount=grant.granted_amount,
        start_time=grant.start_time,
        cliff_time=grant.cliff_time,
        end_time=grant.end_time,
        released_amount=grant.released_amount,
        beneficiary=grant.beneficiary,
    )


class ReleaseCoordinator(BaseService[VestingGrant]):
    """
    Executes releases.

    Contract:
        release_for(account) releases whatever has vested for account's
        current grant as of clock.timestamp().

    Guarantees:
        - Never releases more than granted_amount in total.
        - Runs inside its own SAVEPOINT: all or nothing.

    Non-goals:
        - Does NOT check the pause switch; releases continue while paused.
        - Does NOT commit.
    """

    def __init__(
        self,
        session: Session,
        value_ledger: ValueLedger,
        clock: Clock | None = None,
        policy: VestingPolicy | None = None,
        holding_account: str = DEFAULT_HOLDING_ACCOUNT,
        event_recorder: EventRecorder | None = None,
    ):
        super().__init__(session)
        self._ledger = value_ledger
        self._clock = clock or SystemClock()
        self._policy = policy or VestingPolicy()
        self._holding_account = holding_account
        self._events = event_recorder or EventRecorder(session, self._clock)

    def release(self, caller: str) -> ReleaseResult:
        """Release the caller's own vested amount."""
        return self.release_for(caller)

    def release_for(self, account: str) -> ReleaseResult:
        """
        Release account's vested amount to account.

        Raises:
            InvalidIdentityError, GrantNotFoundError, GrantInactiveError,
            BeforeCliffError, ValueTransferError.
        """
        beneficiary = require_identity(account)

        with self.session.begin_nested():
            grant = load_current_grant(self.session, beneficiary, for_update=True)
            if grant is None:
                raise GrantNotFoundError(beneficiary)
            if not grant.active:
                raise GrantInactiveError(beneficiary, str(grant.id))
            return self.release_grant(grant, self._clock.timestamp())

    def release_grant(self, grant: VestingGrant, now: int) -> ReleaseResult:
        """
        Release an already-loaded, active grant as of ``now``.

        Preconditions:
            - grant is active and locked by the caller's transaction.
        """
        releasable = compute_releasable(schedule_of(grant), now, self._policy.period_length)

        if releasable == 0:
            logger.info(
                "release_noop",
                extra={
                    "beneficiary": grant.beneficiary,
                    "released_amount": str(grant.released_amount),
                },
            )
            return ReleaseResult(
                beneficiary=grant.beneficiary,
                released=0,
                total_released=grant.released_amount,
                granted_amount=grant.granted_amount,
                released_at=now,
                grant_id=grant.id,
            )

        # INVARIANT: STATE_BEFORE_TRANSFER -- flush before the ledger call
        grant.released_amount = grant.released_amount + releasable
        self.session.flush()
        total_released = grant.released_amount

        if not self._ledger.move_value(self._holding_account, grant.beneficiary, releasable):
            raise ValueTransferError(self._holding_account, grant.beneficiary, releasable)

        self._events.record_release(grant, releasable)

        logger.info(
            "grant_released",
            extra={
                "beneficiary": grant.beneficiary,
                "released": str(releasable),
                "total_released": str(total_released),
                "granted_amount": str(grant.granted_amount),
            },
        )
        return ReleaseResult(
            beneficiary=grant.beneficiary,
            released=releasable,
            total_released=total_released,
            granted_amount=grant.granted_amount,
            released_at=now,
            grant_id=grant.id,
        )
