"""
VestingRegistry -- beneficiary -> single active grant, plus the lookup list.

Responsibility:
    Owns the grant lifecycle entry point: validates and records new
    grants, pulls the granted value into the holding account, emits the
    Grant notification, and triggers the eager release when the cliff has
    already passed.  Also answers the read accessors over grant state.

Architecture position:
    Kernel > Services -- imperative shell.  Consults the AccessGate and
    ValueLedger capabilities; delegates eager release to
    ReleaseCoordinator.

create_grant checks, in this order (each a distinct failure):
    1. caller is not the holding account    InvalidIdentityError
    2. caller is an authorized issuer       UnauthorizedError
    3. system not paused                    SystemPausedError
    4. beneficiary identity is non-null     InvalidIdentityError
    5. beneficiary is not the holding acct  InvalidIdentityError
    6. beneficiary has no active grant      DuplicateGrantError
    7. integer terms, 0 < amount <= max     InvalidAmountError / InvalidScheduleError
    8. start >= start_time_floor            InvalidScheduleError
    9. vest_duration > 0                    InvalidScheduleError
   10. vest_duration >= period_length       InvalidScheduleError
   11. 0 <= cliff_seconds < vest_duration   InvalidScheduleError

Hex addresses are compared in canonical lower-case form.

Invariants enforced:
    - SINGLE_ACTIVE_GRANT (service check here, partial unique index below).
    - The grant row, lookup entry, value pull, notification and eager
      release commit together or not at all (one SAVEPOINT).

Failure modes:
    - As listed above, plus ValueTransferError when the issuer's value
      cannot be pulled, and GrantNotFoundError / GrantInactiveError from
      the read accessors.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from vesting_kernel.domain.access import AccessGate
from vesting_kernel.domain.clock import Clock, SystemClock
from vesting_kernel.domain.dtos import GrantRequest, GrantResult, GrantSnapshot
from vesting_kernel.domain.identity import canonical_identity, require_identity
from vesting_kernel.domain.policy import VestingPolicy
from vesting_kernel.domain.schedule import validate_grant_terms
from vesting_kernel.domain.value_ledger import DEFAULT_HOLDING_ACCOUNT, ValueLedger
from vesting_kernel.exceptions import (
    DuplicateGrantError,
    GrantInactiveError,
    GrantNotFoundError,
    InvalidIdentityError,
    SystemPausedError,
    UnauthorizedError,
    ValueTransferError,
)
from vesting_kernel.logging_config import get_logger
from vesting_kernel.models.beneficiary import BeneficiaryLookupEntry
from vesting_kernel.models.grant import VestingGrant
from vesting_kernel.services.base import BaseService, load_current_grant
from vesting_kernel.services.event_recorder import EventRecorder
from vesting_kernel.services.release_coordinator import ReleaseCoordinator
from vesting_kernel.services.sequence_service import SequenceService

logger = get_logger("services.registry")


class VestingRegistry(BaseService[VestingGrant]):
    """
    Grant creation and grant-state reads.

    Contract:
        create_grant() is the only way a VestingGrant row comes into
        existence.

    Guarantees:
        - At most one active grant per beneficiary.
        - The lookup list gains exactly one entry per successful grant.

    Non-goals:
        - Does NOT commit.
    """

    def __init__(
        self,
        session: Session,
        access_gate: AccessGate,
        value_ledger: ValueLedger,
        clock: Clock | None = None,
        policy: VestingPolicy | None = None,
        holding_account: str = DEFAULT_HOLDING_ACCOUNT,
        event_recorder: EventRecorder | None = None,
        release_coordinator: ReleaseCoordinator | None = None,
    ):
        super().__init__(session)
        self._gate = access_gate
        self._ledger = value_ledger
        self._clock = clock or SystemClock()
        self._policy = policy or VestingPolicy()
        self._holding_account = holding_account
        self._events = event_recorder or EventRecorder(session, self._clock)
        self._sequences = SequenceService(session)
        self._releases = release_coordinator or ReleaseCoordinator(
            session,
            value_ledger,
            clock=self._clock,
            policy=self._policy,
            holding_account=holding_account,
            event_recorder=self._events,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_grant(self, caller: str, request: GrantRequest) -> GrantResult:
        """
        Record a new grant and fund it from the caller.

        Postconditions:
            - An active VestingGrant exists for request.beneficiary with
              released_amount equal to whatever the eager release paid.
            - request.amount has moved from caller to the holding account
              (less any eager release to the beneficiary).
        """
        caller = canonical_identity(caller)
        if caller == self._holding_account:
            raise InvalidIdentityError(
                caller, role="issuer", reason="the holding account cannot issue grants"
            )
        if not self._gate.is_authorized_issuer(caller):
            logger.warning(
                "grant_denied",
                extra={"caller": caller, "reason": "not_authorized"},
            )
            raise UnauthorizedError(caller, "create_grant")
        if self._gate.is_paused():
            raise SystemPausedError("create_grant")

        beneficiary = require_identity(request.beneficiary)
        if beneficiary == self._holding_account:
            raise InvalidIdentityError(
                beneficiary, reason="the holding account cannot be a beneficiary"
            )

        existing = load_current_grant(self.session, beneficiary)
        # INVARIANT: SINGLE_ACTIVE_GRANT
        if existing is not None and existing.active:
            raise DuplicateGrantError(beneficiary, str(existing.id))

        schedule = validate_grant_terms(
            request.amount,
            request.start,
            request.cliff_seconds,
            request.vest_duration,
            self._policy,
        )
        now = self._clock.timestamp()

        with self.session.begin_nested():
            grant = VestingGrant(
                grant_seq=self._sequences.next_value(SequenceService.VESTING_GRANT),
                active=True,
                issuer=caller,
                beneficiary=beneficiary,
                granted_amount=schedule.granted_amount,
                start_time=schedule.start_time,
                cliff_time=schedule.cliff_time,
                end_time=schedule.end_time,
                revocable=request.revocable,
                released_amount=0,
                created_at=self._clock.now_utc(),
            )
            self.session.add(grant)
            self.session.flush()

            self.session.add(
                BeneficiaryLookupEntry(
                    seq=self._sequences.next_value(SequenceService.BENEFICIARY_LOOKUP),
                    beneficiary=beneficiary,
                    grant_id=grant.id,
                )
            )
            self.session.flush()

            if not self._ledger.move_value(caller, self._holding_account, schedule.granted_amount):
                raise ValueTransferError(caller, self._holding_account, schedule.granted_amount)

            self._events.record_grant(grant)

            logger.info(
                "grant_created",
                extra={
                    "beneficiary": beneficiary,
                    "issuer": caller,
                    "granted_amount": str(schedule.granted_amount),
                    "start_time": schedule.start_time,
                    "cliff_time": schedule.cliff_time,
                    "end_time": schedule.end_time,
                    "revocable": request.revocable,
                },
            )

            initial_release = None
            if schedule.cliff_time <= now:
                initial_release = self._releases.release_grant(grant, now)

        return GrantResult(
            grant=GrantSnapshot.from_model(grant),
            initial_release=initial_release,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _require_grant(self, beneficiary: str) -> VestingGrant:
        beneficiary = require_identity(beneficiary)
        grant = load_current_grant(self.session, beneficiary)
        if grant is None:
            raise GrantNotFoundError(beneficiary)
        return grant

    def get_grant(self, beneficiary: str) -> GrantSnapshot:
        """Snapshot of the beneficiary's current grant, active or revoked."""
        return GrantSnapshot.from_model(self._require_grant(beneficiary))

    def get_grant_balance_of(self, beneficiary: str) -> int:
        """
        granted_amount - released_amount of the active grant.

        Raises:
            InvalidIdentityError, GrantNotFoundError, GrantInactiveError.
        """
        grant = self._require_grant(beneficiary)
        if not grant.active:
            raise GrantInactiveError(grant.beneficiary, str(grant.id))
        return grant.remaining_amount

    def get_grant_beneficiaries(self) -> list[str]:
        """Every beneficiary ever granted, in grant order, duplicates included."""
        return list(
            self.session.execute(
                select(BeneficiaryLookupEntry.beneficiary)
                .order_by(BeneficiaryLookupEntry.seq)
            ).scalars()
        )
