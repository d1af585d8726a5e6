"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable values that cross the service boundary: the grant request,
    a read-only snapshot of a grant, and the results of grant, release and
    revoke operations.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() exists as a boundary converter and is only invoked from
    the service and selector layers.

Invariants enforced:
    - Services return DTOs, never live ORM entities, so callers cannot
      mutate grant rows behind the services' back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from vesting_kernel.domain.schedule import GrantSchedule

if TYPE_CHECKING:
    from vesting_kernel.models.grant import VestingGrant as VestingGrantModel


@dataclass(frozen=True)
class GrantRequest:
    """
    Terms of a new grant as supplied by the issuer.

    start and cliff/duration are unix seconds; amount is whole token units.
    """

    beneficiary: str
    amount: int
    start: int
    cliff_seconds: int
    vest_duration: int
    revocable: bool


@dataclass(frozen=True)
class GrantSnapshot:
    """
    Point-in-time, read-only view of a grant row.

    Guarantees:
        - Detached from the session; safe to hold after commit.
    """

    grant_id: UUID
    grant_seq: int
    issuer: str
    beneficiary: str
    granted_amount: int
    released_amount: int
    start_time: int
    cliff_time: int
    end_time: int
    revocable: bool
    active: bool
    created_at: datetime
    revoked_at: datetime | None = None

    @property
    def remaining_amount(self) -> int:
        return self.granted_amount - self.released_amount

    def to_schedule(self) -> GrantSchedule:
        return GrantSchedule(
            granted_amount=self.granted_amount,
            start_time=self.start_time,
            cliff_time=self.cliff_time,
            end_time=self.end_time,
            released_amount=self.released_amount,
            beneficiary=self.beneficiary,
        )

    @classmethod
    def from_model(cls, model: VestingGrantModel) -> GrantSnapshot:
        return cls(
            grant_id=model.id,
            grant_seq=model.grant_seq,
            issuer=model.issuer,
            beneficiary=model.beneficiary,
            granted_amount=model.granted_amount,
            released_amount=model.released_amount,
            start_time=model.start_time,
            cliff_time=model.cliff_time,
            end_time=model.end_time,
            revocable=model.revocable,
            active=model.active,
            created_at=model.created_at,
            revoked_at=model.revoked_at,
        )


@dataclass(frozen=True)
class ReleaseResult:
    """
    Outcome of one release.

    released == 0 is a defined no-op: nothing vested since the last
    release.  released_at is unix seconds.
    """

    beneficiary: str
    released: int
    total_released: int
    granted_amount: int
    released_at: int
    grant_id: UUID | None = None

    @property
    def is_noop(self) -> bool:
        return self.released == 0

    @property
    def remaining_amount(self) -> int:
        return self.granted_amount - self.total_released


@dataclass(frozen=True)
class RevocationResult:
    """Outcome of a revocation.  revoked_at is unix seconds."""

    beneficiary: str
    issuer: str
    returned_amount: int
    released_amount: int
    revoked_at: int
    grant_id: UUID | None = None


@dataclass(frozen=True)
class GrantResult:
    """
    Outcome of create_grant.

    initial_release is set when the cliff had already elapsed at creation
    and the eager release ran in the same operation (it may still have
    released 0 if no full accrual period had elapsed).
    """

    grant: GrantSnapshot
    initial_release: ReleaseResult | None = None

    @property
    def grant_id(self) -> UUID:
        return self.grant.grant_id
