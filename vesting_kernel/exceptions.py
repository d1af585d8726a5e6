"""
Typed Exception Hierarchy for the Vesting Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Grant, release and revoke move value irreversibly. Callers must be able to
tell "not yet" (BeforeCliffError) from "never" (GrantInactiveError) from
"not you" (UnauthorizedError) without parsing message strings:

    try:
        vesting.release_for(beneficiary)
    except BeforeCliffError as e:
        schedule_retry(at=e.cliff_time)
    except GrantInactiveError as e:
        log.info(f"Grant for {e.beneficiary} was revoked")

Every exception has:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured ATTRIBUTES (survive logging and serialization)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from VestingKernelError:

    VestingKernelError (base)
    |
    +-- AccessError
    |   +-- UnauthorizedError
    |   +-- SystemPausedError
    |
    +-- GrantError
    |   +-- InvalidIdentityError
    |   +-- DuplicateGrantError
    |   +-- InvalidAmountError
    |   +-- InvalidScheduleError
    |   +-- GrantNotFoundError
    |   +-- GrantInactiveError
    |   +-- GrantNotRevocableError
    |
    +-- ReleaseError
    |   +-- BeforeCliffError
    |
    +-- LedgerError
    |   +-- ValueTransferError
    |   +-- InsufficientBalanceError
    |   +-- InsufficientAllowanceError
    |   +-- SupplyAlreadyMintedError
    |   +-- InvalidSupplyAllocationError
    |
    +-- EventError
    |   +-- EventChainBrokenError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- InvariantViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                       | When Raised
-------------|----------------------------|--------------------------------------
Access       | UNAUTHORIZED               | Caller may not grant / revoke / admin
             | SYSTEM_PAUSED              | Pause switch is on
-------------|----------------------------|--------------------------------------
Grant        | INVALID_IDENTITY           | Null / empty / zero-address identity
             | DUPLICATE_GRANT            | Beneficiary already has an active grant
             | INVALID_AMOUNT             | Zero, negative or > uint256 amount
             | INVALID_SCHEDULE           | Bad start, duration or cliff
             | GRANT_NOT_FOUND            | No grant recorded for beneficiary
             | GRANT_INACTIVE             | Grant was revoked
             | GRANT_NOT_REVOCABLE        | Revoke on a non-revocable grant
-------------|----------------------------|--------------------------------------
Release      | BEFORE_CLIFF               | Release attempted before cliff_time
-------------|----------------------------|--------------------------------------
Ledger       | VALUE_TRANSFER_FAILED      | Value Ledger refused move_value
             | INSUFFICIENT_BALANCE       | Token transfer exceeds balance
             | INSUFFICIENT_ALLOWANCE     | transfer_from exceeds allowance
             | SUPPLY_ALREADY_MINTED      | Second initial mint
             | INVALID_SUPPLY_ALLOCATION  | Mint allocations do not sum to supply
-------------|----------------------------|--------------------------------------
Event        | EVENT_CHAIN_BROKEN         | Notification hash chain mismatch
-------------|----------------------------|--------------------------------------
Immutability | IMMUTABILITY_VIOLATION     | Modifying a frozen grant field
-------------|----------------------------|--------------------------------------
Invariant    | INVARIANT_VIOLATION        | Internal consistency failure (fatal)

===============================================================================
HANDLING PATTERNS
===============================================================================

1. ZERO RELEASABLE IS NOT AN ERROR:

    result = vesting.release_for(beneficiary)
    if result.released == 0:
        pass  # nothing vested since the last release

2. INVARIANT VIOLATIONS ARE FATAL:

    except InvariantViolationError as e:
        alert_operators(e)
        halt_processing()  # bookkeeping can no longer be trusted

===============================================================================
"""


class VestingKernelError(Exception):
    """
    Base exception for all vesting kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "VESTING_KERNEL_ERROR"


# Access-related exceptions


class AccessError(VestingKernelError):
    """Base exception for access-gate failures."""

    code: str = "ACCESS_ERROR"


class UnauthorizedError(AccessError):
    """Caller lacks permission for the requested operation."""

    code: str = "UNAUTHORIZED"

    def __init__(self, caller: str, operation: str, reason: str = "caller is not authorized"):
        self.caller = caller
        self.operation = operation
        self.reason = reason
        super().__init__(f"Unauthorized {operation} by {caller!r}: {reason}")


class SystemPausedError(AccessError):
    """The system is halted; state-changing grant operations are rejected."""

    code: str = "SYSTEM_PAUSED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: system is paused")


# Grant-related exceptions


class GrantError(VestingKernelError):
    """Base exception for grant lifecycle errors."""

    code: str = "GRANT_ERROR"


class InvalidIdentityError(GrantError):
    """Identity is null, empty, the zero address, or reserved for the kernel."""

    code: str = "INVALID_IDENTITY"

    def __init__(self, identity: str | None, role: str = "beneficiary", reason: str = ""):
        self.identity = identity
        self.role = role
        self.reason = reason
        message = f"Invalid {role} identity: {identity!r}"
        super().__init__(f"{message} ({reason})" if reason else message)


class DuplicateGrantError(GrantError):
    """Beneficiary already has an active grant."""

    code: str = "DUPLICATE_GRANT"

    def __init__(self, beneficiary: str, existing_grant_id: str):
        self.beneficiary = beneficiary
        self.existing_grant_id = existing_grant_id
        super().__init__(
            f"Beneficiary {beneficiary} already has active grant {existing_grant_id}"
        )


class InvalidAmountError(GrantError):
    """Granted amount is zero, negative, or exceeds the token width."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: int, reason: str):
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid grant amount {amount}: {reason}")


class InvalidScheduleError(GrantError):
    """
    Vesting schedule parameters are invalid.

    Covers: non-integer terms, start before the sanity floor, non-positive
    duration, a duration shorter than one accrual period, and
    cliff >= duration.
    """

    code: str = "INVALID_SCHEDULE"

    def __init__(self, reason: str, **params):
        self.reason = reason
        self.params = params
        super().__init__(f"Invalid vesting schedule: {reason}")


class GrantNotFoundError(GrantError):
    """No grant has ever been recorded for the beneficiary."""

    code: str = "GRANT_NOT_FOUND"

    def __init__(self, beneficiary: str):
        self.beneficiary = beneficiary
        super().__init__(f"No grant found for beneficiary {beneficiary}")


class GrantInactiveError(GrantError):
    """The beneficiary's grant has been revoked."""

    code: str = "GRANT_INACTIVE"

    def __init__(self, beneficiary: str, grant_id: str):
        self.beneficiary = beneficiary
        self.grant_id = grant_id
        super().__init__(f"Grant {grant_id} for {beneficiary} is not active")


class GrantNotRevocableError(GrantError):
    """Revocation attempted on a grant created with revocable=False."""

    code: str = "GRANT_NOT_REVOCABLE"

    def __init__(self, beneficiary: str, grant_id: str):
        self.beneficiary = beneficiary
        self.grant_id = grant_id
        super().__init__(f"Grant {grant_id} for {beneficiary} is not revocable")


# Release-related exceptions


class ReleaseError(VestingKernelError):
    """Base exception for release errors."""

    code: str = "RELEASE_ERROR"


class BeforeCliffError(ReleaseError):
    """
    Release attempted before the cliff elapsed.

    Distinct from a zero-releasable release, which is a defined no-op.
    """

    code: str = "BEFORE_CLIFF"

    def __init__(self, beneficiary: str, cliff_time: int, now: int):
        self.beneficiary = beneficiary
        self.cliff_time = cliff_time
        self.now = now
        super().__init__(
            f"Cannot release for {beneficiary} before cliff at {cliff_time} (now {now})"
        )


# Ledger-related exceptions


class LedgerError(VestingKernelError):
    """Base exception for Value Ledger errors."""

    code: str = "LEDGER_ERROR"


class ValueTransferError(LedgerError):
    """The Value Ledger refused a move_value call."""

    code: str = "VALUE_TRANSFER_FAILED"

    def __init__(self, source: str, destination: str, amount: int):
        self.source = source
        self.destination = destination
        self.amount = amount
        super().__init__(
            f"Value transfer of {amount} from {source} to {destination} failed"
        )


class InsufficientBalanceError(LedgerError):
    """Token transfer exceeds the holder's balance."""

    code: str = "INSUFFICIENT_BALANCE"

    def __init__(self, holder: str, balance: int, requested: int):
        self.holder = holder
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient balance for {holder}: balance={balance}, requested={requested}"
        )


class InsufficientAllowanceError(LedgerError):
    """transfer_from exceeds the owner's allowance to the spender."""

    code: str = "INSUFFICIENT_ALLOWANCE"

    def __init__(self, owner: str, spender: str, allowance: int, requested: int):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.requested = requested
        super().__init__(
            f"Insufficient allowance {owner} -> {spender}: "
            f"allowance={allowance}, requested={requested}"
        )


class SupplyAlreadyMintedError(LedgerError):
    """The fixed supply has already been minted."""

    code: str = "SUPPLY_ALREADY_MINTED"

    def __init__(self, total_supply: int):
        self.total_supply = total_supply
        super().__init__(f"Token supply already minted ({total_supply})")


class InvalidSupplyAllocationError(LedgerError):
    """Initial mint allocations do not add up to the configured supply."""

    code: str = "INVALID_SUPPLY_ALLOCATION"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Initial allocations sum to {actual}, expected total supply {expected}"
        )


# Notification-related exceptions


class EventError(VestingKernelError):
    """Base exception for notification log errors."""

    code: str = "EVENT_ERROR"


class EventChainBrokenError(EventError):
    """Notification hash chain validation failed."""

    code: str = "EVENT_CHAIN_BROKEN"

    def __init__(self, event_id: str, expected_hash: str, actual_hash: str):
        self.event_id = event_id
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Event chain broken at {event_id}: "
            f"expected {expected_hash}, found {actual_hash}"
        )


# Immutability-related exceptions


class ImmutabilityError(VestingKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Grant schedule fields are frozen at creation; grants, lookup entries
    and notifications are never deleted.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Internal consistency


class InvariantViolationError(VestingKernelError):
    """
    Internal bookkeeping is inconsistent.

    Raised for conditions that valid inputs can never produce, such as an
    accrual underflow (vested < released). Never a user error.
    """

    code: str = "INVARIANT_VIOLATION"

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"Invariant {invariant} violated: {detail}")
