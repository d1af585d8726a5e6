"""
VestingPolicy -- schedule parameters fixed for the lifetime of a deployment.

The kernel never reads configuration files.  ``vesting_config`` builds a
VestingPolicy from YAML and hands it to the services; tests construct one
directly.
"""

from __future__ import annotations

from dataclasses import dataclass

SECONDS_PER_DAY = 86_400

# 30-day accrual period
DEFAULT_PERIOD_LENGTH = 30 * SECONDS_PER_DAY

# 2018-01-01T00:00:00Z; rejects clearly invalid historical start dates
DEFAULT_START_TIME_FLOOR = 1_514_764_800

# Fixed-width unsigned token amounts
UINT256_MAX = 2**256 - 1


@dataclass(frozen=True, slots=True)
class VestingPolicy:
    """
    Deployment-wide vesting parameters.

    Guarantees:
        - period_length > 0
        - 0 < max_amount <= UINT256_MAX
    """

    period_length: int = DEFAULT_PERIOD_LENGTH
    start_time_floor: int = DEFAULT_START_TIME_FLOOR
    max_amount: int = UINT256_MAX

    def __post_init__(self) -> None:
        if self.period_length <= 0:
            raise ValueError(f"period_length must be positive, got {self.period_length}")
        if self.start_time_floor < 0:
            raise ValueError(f"start_time_floor must be non-negative, got {self.start_time_floor}")
        if not 0 < self.max_amount <= UINT256_MAX:
            raise ValueError(f"max_amount must be in (0, 2**256 - 1], got {self.max_amount}")
