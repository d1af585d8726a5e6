"""
Module: vesting_kernel.db.types
Responsibility: Column types for token quantities and UTC timestamps.
    Centralizes the fixed-width unsigned amount type so that every model
    stores token units identically.
Architecture position: Kernel > DB.  May be imported by models/ and
    services/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Token amounts are whole units in [0, 2**256).  No floats, no
      Decimal fractions.
    - Amounts are persisted as canonical decimal text so that values
      beyond 64 bits survive every backend unchanged.

Failure modes:
    - TokenAmountOutOfRangeError (a ValueError) when binding a negative,
      oversized or non-integer value.

Audit relevance:
    Because amounts are stored as text, SQL-side arithmetic and ordering
    on amount columns is meaningless.  All amount arithmetic happens in
    Python on int values.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator

# Exclusive upper bound of a 256-bit unsigned amount
TOKEN_AMOUNT_BOUND = 2**256

# len(str(2**256 - 1)) == 78
TOKEN_AMOUNT_DIGITS = 78


class TokenAmountOutOfRangeError(ValueError):
    """Raised when a value cannot be stored as a 256-bit unsigned amount."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Token amount out of range [0, 2**256): {value!r}")


def validate_token_amount(value) -> int:
    """
    Validate that value is a storable token amount.

    Postconditions: Returns value unchanged iff it is an int (not bool)
        with 0 <= value < 2**256.

    Raises:
        TokenAmountOutOfRangeError: Otherwise.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TokenAmountOutOfRangeError(value)
    if value < 0 or value >= TOKEN_AMOUNT_BOUND:
        raise TokenAmountOutOfRangeError(value)
    return value


class TokenAmount(TypeDecorator):
    """
    256-bit unsigned integer stored as decimal text.

    Guarantees:
        - process_bind_param: int -> str, range-checked.
        - process_result_value: str -> int.
    """

    impl = String(TOKEN_AMOUNT_DIGITS)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(validate_token_amount(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime on every backend.

    SQLite drops the offset on the way back; results are re-tagged as UTC
    so a reloaded row compares equal to the instance that was written.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"naive datetime cannot be stored: {value!r}")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
