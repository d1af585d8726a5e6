"""
Module: vesting_kernel.selectors.grant_selector
Responsibility: Read-side projections over grants and notifications:
    vesting status as of a time, grant listings, and the notification log.
Architecture position: Kernel > Selectors.  Read-only.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vesting_kernel.domain.accrual import vested_amount
from vesting_kernel.domain.dtos import GrantSnapshot
from vesting_kernel.domain.identity import require_identity
from vesting_kernel.domain.policy import VestingPolicy
from vesting_kernel.exceptions import GrantNotFoundError
from vesting_kernel.models.grant import VestingGrant
from vesting_kernel.models.vesting_event import VestingEvent
from vesting_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class VestingStatus:
    """
    Where a grant stands at ``as_of`` (unix seconds).

    releasable is what release_for() would pay at as_of; it is 0 for a
    revoked grant and before the cliff.
    """

    grant: GrantSnapshot
    as_of: int
    vested: int
    releasable: int
    next_unlock_time: int | None

    @property
    def unvested(self) -> int:
        return self.grant.granted_amount - self.vested


@dataclass(frozen=True)
class VestingEventRecord:
    """One notification from the log."""

    seq: int
    event_type: str
    issuer: str | None
    beneficiary: str
    amount: int
    grant_id: UUID
    occurred_at: datetime
    hash: str


class GrantSelector(BaseSelector[VestingGrant]):
    """Read-only grant and notification queries."""

    def __init__(self, session: Session, policy: VestingPolicy | None = None):
        super().__init__(session)
        self._policy = policy or VestingPolicy()

    def _current(self, beneficiary: str) -> VestingGrant:
        beneficiary = require_identity(beneficiary)
        grant = self.session.execute(
            select(VestingGrant)
            .where(VestingGrant.beneficiary == beneficiary)
            .order_by(VestingGrant.grant_seq.desc())
            .limit(1)
        ).scalar_one_or_none()
        if grant is None:
            raise GrantNotFoundError(beneficiary)
        return grant

    def _next_unlock(self, snapshot: GrantSnapshot, as_of: int) -> int | None:
        if not snapshot.active or as_of >= snapshot.end_time:
            return None
        if as_of < snapshot.cliff_time:
            return snapshot.cliff_time
        period = self._policy.period_length
        elapsed = (as_of - snapshot.start_time) // period
        return min(snapshot.start_time + (elapsed + 1) * period, snapshot.end_time)

    def vesting_status(self, beneficiary: str, as_of: int) -> VestingStatus:
        """
        Project the beneficiary's current grant to ``as_of``.

        Raises:
            InvalidIdentityError, GrantNotFoundError.
        """
        snapshot = GrantSnapshot.from_model(self._current(beneficiary))
        vested = vested_amount(snapshot.to_schedule(), as_of, self._policy.period_length)
        releasable = max(vested - snapshot.released_amount, 0) if snapshot.active else 0
        return VestingStatus(
            grant=snapshot,
            as_of=as_of,
            vested=vested,
            releasable=releasable,
            next_unlock_time=self._next_unlock(snapshot, as_of),
        )

    def list_grants(self, *, active_only: bool = False) -> list[GrantSnapshot]:
        """All grant rows in creation order."""
        stmt = select(VestingGrant).order_by(VestingGrant.grant_seq)
        if active_only:
            stmt = stmt.where(VestingGrant.active.is_(True))
        return [GrantSnapshot.from_model(g) for g in self.session.execute(stmt).scalars()]

    def grant_history(self, beneficiary: str) -> list[GrantSnapshot]:
        """Every grant the beneficiary ever held, oldest first."""
        beneficiary = require_identity(beneficiary)
        rows = self.session.execute(
            select(VestingGrant)
            .where(VestingGrant.beneficiary == beneficiary)
            .order_by(VestingGrant.grant_seq)
        ).scalars()
        return [GrantSnapshot.from_model(g) for g in rows]

    def list_events(self, beneficiary: str | None = None) -> list[VestingEventRecord]:
        """Notifications in sequence order, optionally for one beneficiary."""
        stmt = select(VestingEvent).order_by(VestingEvent.seq)
        if beneficiary is not None:
            stmt = stmt.where(VestingEvent.beneficiary == require_identity(beneficiary))
        return [
            VestingEventRecord(
                seq=e.seq,
                event_type=e.event_type,
                issuer=e.issuer,
                beneficiary=e.beneficiary,
                amount=e.amount,
                grant_id=e.grant_id,
                occurred_at=e.occurred_at,
                hash=e.hash,
            )
            for e in self.session.execute(stmt).scalars()
        ]
