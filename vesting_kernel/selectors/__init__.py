"""Read-only query selectors."""

from vesting_kernel.selectors.base import BaseSelector
from vesting_kernel.selectors.grant_selector import (
    GrantSelector,
    VestingEventRecord,
    VestingStatus,
)

__all__ = [
    "BaseSelector",
    "GrantSelector",
    "VestingEventRecord",
    "VestingStatus",
]
