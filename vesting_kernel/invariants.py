"""
Kernel Invariants Contract.

These invariants are structural law. No configuration value may switch
them off. Configuration influences schedule parameters (accrual period,
start floor), never whether these rules apply.

This module declares the invariants explicitly. Enforcement is
distributed across the accrual engine, VestingRegistry,
ReleaseCoordinator, RevocationHandler, the ORM immutability listeners
and database constraints.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    RELEASE_CEILING = "release_ceiling"
    """released_amount never exceeds granted_amount. Enforced by the
    accrual cap and by the VestingGrant before_update listener."""

    RELEASE_MONOTONIC = "release_monotonic"
    """released_amount never decreases. Enforced by the VestingGrant
    before_update listener."""

    SINGLE_ACTIVE_GRANT = "single_active_grant"
    """At most one active grant per beneficiary. Enforced by
    VestingRegistry and a partial unique index."""

    REVOCATION_FINAL = "revocation_final"
    """A revoked grant never becomes active again and admits no further
    release or revoke. Enforced by ReleaseCoordinator,
    RevocationHandler and the VestingGrant before_update listener."""

    SCHEDULE_FROZEN = "schedule_frozen"
    """issuer, beneficiary, granted_amount, start/cliff/end times and
    revocable never change after creation. Enforced by ORM listeners."""

    STATE_BEFORE_TRANSFER = "state_before_transfer"
    """Bookkeeping is flushed before any Value Ledger call, so a
    reentrant call observes the updated state."""

    ACCRUAL_NON_NEGATIVE = "accrual_non_negative"
    """Vested-to-date is never below released_amount. A violation is a
    fatal InvariantViolationError in the accrual engine."""

    APPEND_ONLY = "append_only"
    """Notifications and beneficiary lookup entries are never updated or
    deleted. Enforced by ORM listeners."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = ("vesting_config",)
