"""
Accrual Engine -- how much of a grant is releasable at a given instant.

Responsibility:
    Pure integer arithmetic over a GrantSchedule.  Vesting unlocks in
    whole accrual periods (30 days by default): each elapsed period
    unlocks ``granted_amount // accrual_periods`` units.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O, no clock.

Algorithm (before end_time), in exactly this order:
    1. now < cliff_time                       -> BeforeCliffError
    2. accrual_periods = (end - start) // period_length
    3. rate            = granted // accrual_periods
    4. periods_elapsed = (now - start) // period_length
    5. releasable      = periods_elapsed * rate - released
    6. if released + releasable > granted: releasable = granted - released

    Integer division rounds every period down; the cap in step 6 is the
    only place the division remainder is absorbed.  Reordering these
    steps changes rounding outcomes.

    At or after end_time the grant is fully vested and releasable is
    granted - released, so cumulative releases equal granted exactly.

Invariants enforced:
    - ACCRUAL_NON_NEGATIVE: periods_elapsed * rate >= released.
    - RELEASE_CEILING: released + releasable <= granted.

Failure modes:
    - BeforeCliffError: now < cliff_time (a user-facing "not yet").
    - InvariantViolationError: zero accrual periods, released above
      granted, or vested below released.  Valid grants never reach these.
"""

from __future__ import annotations

from vesting_kernel.domain.policy import DEFAULT_PERIOD_LENGTH
from vesting_kernel.domain.schedule import GrantSchedule
from vesting_kernel.exceptions import BeforeCliffError, InvariantViolationError
from vesting_kernel.invariants import KernelInvariant


def accrual_periods(schedule: GrantSchedule, period_length: int = DEFAULT_PERIOD_LENGTH) -> int:
    """Total number of discrete unlock periods in the schedule."""
    periods = (schedule.end_time - schedule.start_time) // period_length
    if periods <= 0:
        raise InvariantViolationError(
            KernelInvariant.ACCRUAL_NON_NEGATIVE.value,
            f"schedule {schedule.start_time}..{schedule.end_time} spans no "
            f"accrual period of {period_length}s",
        )
    return periods


def rate_per_period(schedule: GrantSchedule, period_length: int = DEFAULT_PERIOD_LENGTH) -> int:
    """Units unlocked per whole period (remainder deferred to the end)."""
    return schedule.granted_amount // accrual_periods(schedule, period_length)


def compute_releasable(
    schedule: GrantSchedule,
    now: int,
    period_length: int = DEFAULT_PERIOD_LENGTH,
) -> int:
    """
    Amount releasable at ``now``, net of what was already released.

    Preconditions:
        - schedule came from a validated grant (cliff < end, at least
          one accrual period).

    Postconditions:
        - 0 <= result <= schedule.granted_amount - schedule.released_amount.

    Raises:
        BeforeCliffError: now < schedule.cliff_time.
        InvariantViolationError: bookkeeping inconsistency.
    """
    if now < schedule.cliff_time:
        raise BeforeCliffError(schedule.beneficiary, schedule.cliff_time, now)

    granted = schedule.granted_amount
    released = schedule.released_amount
    if released > granted:
        raise InvariantViolationError(
            KernelInvariant.RELEASE_CEILING.value,
            f"released {released} exceeds granted {granted}",
        )

    if now >= schedule.end_time:
        return granted - released

    rate = rate_per_period(schedule, period_length)
    periods_elapsed = (now - schedule.start_time) // period_length

    vested = periods_elapsed * rate
    # INVARIANT: ACCRUAL_NON_NEGATIVE -- unsigned subtraction must not underflow
    if vested < released:
        raise InvariantViolationError(
            KernelInvariant.ACCRUAL_NON_NEGATIVE.value,
            f"vested {vested} is below released {released} at {now}",
        )
    releasable = vested - released

    # INVARIANT: RELEASE_CEILING -- the cap absorbs the rounding remainder
    if released + releasable > granted:
        releasable = granted - released

    return releasable


def vested_amount(
    schedule: GrantSchedule,
    now: int,
    period_length: int = DEFAULT_PERIOD_LENGTH,
) -> int:
    """
    Total unlocked as of ``now`` (released or not); 0 before the cliff.

    Read-side projection; never raises BeforeCliffError.
    """
    if now < schedule.cliff_time:
        return 0
    if now >= schedule.end_time:
        return schedule.granted_amount
    periods_elapsed = (now - schedule.start_time) // period_length
    return min(periods_elapsed * rate_per_period(schedule, period_length), schedule.granted_amount)
