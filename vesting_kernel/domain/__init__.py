"""
Pure domain layer: schedules, accrual arithmetic, DTOs, clock, and the
collaborator interfaces (AccessGate, ValueLedger).  No I/O.
"""

from vesting_kernel.domain.access import AccessGate, StaticAccessGate
from vesting_kernel.domain.accrual import (
    accrual_periods,
    compute_releasable,
    rate_per_period,
    vested_amount,
)
from vesting_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
)
from vesting_kernel.domain.dtos import (
    GrantRequest,
    GrantResult,
    GrantSnapshot,
    ReleaseResult,
    RevocationResult,
)
from vesting_kernel.domain.identity import (
    ZERO_ADDRESS,
    canonical_identity,
    is_null_identity,
    require_identity,
)
from vesting_kernel.domain.policy import (
    DEFAULT_PERIOD_LENGTH,
    DEFAULT_START_TIME_FLOOR,
    UINT256_MAX,
    VestingPolicy,
)
from vesting_kernel.domain.schedule import GrantSchedule, validate_grant_terms
from vesting_kernel.domain.value_ledger import DEFAULT_HOLDING_ACCOUNT, ValueLedger

__all__ = [
    "AccessGate",
    "StaticAccessGate",
    "accrual_periods",
    "compute_releasable",
    "rate_per_period",
    "vested_amount",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "GrantRequest",
    "GrantResult",
    "GrantSnapshot",
    "ReleaseResult",
    "RevocationResult",
    "ZERO_ADDRESS",
    "canonical_identity",
    "is_null_identity",
    "require_identity",
    "DEFAULT_PERIOD_LENGTH",
    "DEFAULT_START_TIME_FLOOR",
    "UINT256_MAX",
    "VestingPolicy",
    "GrantSchedule",
    "validate_grant_terms",
    "DEFAULT_HOLDING_ACCOUNT",
    "ValueLedger",
]
