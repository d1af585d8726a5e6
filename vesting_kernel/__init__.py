"""
Vesting Kernel - time-based token entitlement ledger

A transactional, append-only vesting ledger with:
- One active grant per beneficiary
- Linear accrual in discrete 30-day periods, with optional cliff
- Idempotent, reentrancy-safe release
- Issuer revocation of the unvested remainder
- Hash-chained Grant / Release / Revoke notifications
"""

__version__ = "0.1.0"
