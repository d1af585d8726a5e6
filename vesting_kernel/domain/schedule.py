"""
Schedule -- the immutable vesting schedule and its creation-time validation.

Responsibility:
    Defines GrantSchedule, the pure snapshot of a grant the accrual
    engine computes over, and validate_grant_terms(), the schedule and
    amount checks performed before a grant is written.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - cliff_time < end_time at creation.
    - The vesting duration spans at least one accrual period, so the
      accrual engine never divides by zero.
    - 0 < granted_amount <= policy.max_amount.

Failure modes:
    - InvalidAmountError, InvalidScheduleError.
"""

from __future__ import annotations

from dataclasses import dataclass

from vesting_kernel.domain.policy import VestingPolicy
from vesting_kernel.exceptions import InvalidAmountError, InvalidScheduleError


@dataclass(frozen=True, slots=True)
class GrantSchedule:
    """
    Pure view of a grant's schedule and release progress.

    Guarantees:
        Immutable; carries everything compute_releasable() needs.
    """

    granted_amount: int
    start_time: int
    cliff_time: int
    end_time: int
    released_amount: int = 0
    beneficiary: str = ""

    @property
    def remaining_amount(self) -> int:
        """Granted but not yet released."""
        return self.granted_amount - self.released_amount

    def with_released(self, released_amount: int) -> GrantSchedule:
        """Return a copy with a different released_amount."""
        return GrantSchedule(
            granted_amount=self.granted_amount,
            start_time=self.start_time,
            cliff_time=self.cliff_time,
            end_time=self.end_time,
            released_amount=released_amount,
            beneficiary=self.beneficiary,
        )


def validate_grant_terms(
    amount: int,
    start: int,
    cliff_seconds: int,
    vest_duration: int,
    policy: VestingPolicy,
) -> GrantSchedule:
    """
    Validate grant terms and build the initial schedule.

    Checks run in a fixed order so that each bad input maps to exactly
    one failure: amount, start floor, positive duration, minimum one
    accrual period, cliff range.  Schedule values must be ints (bool
    excluded), checked right after the amount.

    Raises:
        InvalidAmountError: amount <= 0 or above policy.max_amount.
        InvalidScheduleError: any schedule parameter is out of range.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(amount, "amount must be an integer number of token units")
    if amount <= 0:
        raise InvalidAmountError(amount, "amount must be greater than zero")
    if amount > policy.max_amount:
        raise InvalidAmountError(amount, f"amount exceeds maximum {policy.max_amount}")

    terms = {"start": start, "cliff_seconds": cliff_seconds, "vest_duration": vest_duration}
    for name, value in terms.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidScheduleError(
                f"{name} must be an integer number of seconds", **{name: value}
            )

    if start < policy.start_time_floor:
        raise InvalidScheduleError(
            f"start {start} is before the floor {policy.start_time_floor}",
            start=start,
            start_time_floor=policy.start_time_floor,
        )
    if vest_duration <= 0:
        raise InvalidScheduleError(
            "vesting duration must be greater than zero",
            vest_duration=vest_duration,
        )
    if vest_duration < policy.period_length:
        raise InvalidScheduleError(
            f"vesting duration {vest_duration}s is shorter than one "
            f"accrual period ({policy.period_length}s)",
            vest_duration=vest_duration,
            period_length=policy.period_length,
        )
    if cliff_seconds < 0 or cliff_seconds >= vest_duration:
        raise InvalidScheduleError(
            f"cliff {cliff_seconds}s must be in [0, {vest_duration})",
            cliff_seconds=cliff_seconds,
            vest_duration=vest_duration,
        )

    return GrantSchedule(
        granted_amount=amount,
        start_time=start,
        cliff_time=start + cliff_seconds,
        end_time=start + vest_duration,
    )
