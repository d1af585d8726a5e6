"""
ValueLedger -- the value-movement capability consumed by the kernel.

Responsibility:
    The kernel holds granted value in a single holding account and moves
    it through this interface: pulled from the issuer at grant time,
    pushed to the beneficiary on release, pushed back to the issuer on
    revocation.

Contract:
    move_value() returns True on success and False on refusal
    (insufficient balance or allowance).  Callers translate False into
    ValueTransferError and roll the whole operation back.  An
    implementation may also raise; the exception propagates unchanged.

Reentrancy:
    An implementation may call back into the kernel from inside
    move_value().  The kernel flushes all bookkeeping before calling it,
    so such a call observes the updated state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

# Identity of the account that custodies unreleased grant value
DEFAULT_HOLDING_ACCOUNT = "vesting:holding"


class ValueLedger(ABC):
    """Authorized pull/push of token value between identities."""

    @abstractmethod
    def move_value(self, source: str, destination: str, amount: int) -> bool:
        """Move amount from source to destination; False if refused."""
        ...
