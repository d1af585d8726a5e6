"""ORM models for the vesting kernel."""

from vesting_kernel.models.authorization import AccessControlState, AuthorizedIssuer
from vesting_kernel.models.beneficiary import BeneficiaryLookupEntry
from vesting_kernel.models.grant import GRANT_FROZEN_FIELDS, VestingGrant
from vesting_kernel.models.sequence import SequenceCounter
from vesting_kernel.models.token import TokenAccount, TokenAllowance, TokenSupply
from vesting_kernel.models.vesting_event import VestingEvent, VestingEventType

__all__ = [
    "AccessControlState",
    "AuthorizedIssuer",
    "BeneficiaryLookupEntry",
    "GRANT_FROZEN_FIELDS",
    "VestingGrant",
    "SequenceCounter",
    "TokenAccount",
    "TokenAllowance",
    "TokenSupply",
    "VestingEvent",
    "VestingEventType",
]
