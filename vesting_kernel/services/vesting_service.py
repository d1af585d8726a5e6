"""
VestingService -- the public entry point for the vesting kernel.

Responsibility:
    Wires the registry, release coordinator, revocation handler, event
    recorder, access control and token ledger onto one session and
    exposes the public operations.  Owns the transaction boundary.

Architecture position:
    Kernel > Services -- imperative shell, top of the kernel.  Callers
    outside the kernel (CLIs, jobs, tests) talk to this class only.

Operations:
    create_grant, release, release_for, revoke,
    get_grant_balance_of, get_grant_beneficiaries, get_grant,
    authorize_address, deauthorize_address, pause, unpause

Invariants enforced:
    - Atomicity: with auto_commit=True every state-changing operation
      commits on success and rolls back on any failure.  With
      auto_commit=False the caller owns commit/rollback.

Audit relevance:
    Every operation runs under a LogContext carrying a fresh
    correlation_id, the caller and the beneficiary, and is logged on
    start, completion (with duration) and failure (with exc_code).
"""

from __future__ import annotations

import time
from typing import Callable, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session

from vesting_kernel.db.immutability import register_immutability_listeners
from vesting_kernel.domain.clock import Clock, SystemClock
from vesting_kernel.domain.dtos import (
    GrantRequest,
    GrantResult,
    GrantSnapshot,
    ReleaseResult,
    RevocationResult,
)
from vesting_kernel.domain.policy import VestingPolicy
from vesting_kernel.domain.value_ledger import DEFAULT_HOLDING_ACCOUNT, ValueLedger
from vesting_kernel.logging_config import LogContext, get_logger
from vesting_kernel.services.access_control_service import AccessControlService
from vesting_kernel.services.event_recorder import EventRecorder
from vesting_kernel.services.release_coordinator import ReleaseCoordinator
from vesting_kernel.services.revocation_handler import RevocationHandler
from vesting_kernel.services.token_ledger_service import LedgerValueMover, TokenLedgerService
from vesting_kernel.services.vesting_registry import VestingRegistry

logger = get_logger("services.vesting")

T = TypeVar("T")


class VestingService:
    """
    Facade over the vesting kernel.

    Contract:
        One instance per session.  Defaults build the reference
        AccessControlService and a TokenLedgerService-backed ValueLedger
        on the same session, so value movement shares the grant
        transaction.

    Guarantees:
        - auto_commit=True: commit on success, rollback on failure.
        - Immutability listeners are registered.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: VestingPolicy | None = None,
        access_control: AccessControlService | None = None,
        value_ledger: ValueLedger | None = None,
        token_ledger: TokenLedgerService | None = None,
        holding_account: str = DEFAULT_HOLDING_ACCOUNT,
        auto_commit: bool = True,
    ):
        register_immutability_listeners()

        self._session = session
        self._clock = clock or SystemClock()
        self._policy = policy or VestingPolicy()
        self._auto_commit = auto_commit
        self._holding_account = holding_account

        self.access_control = access_control or AccessControlService(session, self._clock)
        self.token_ledger = token_ledger or TokenLedgerService(session, self._clock)
        self.value_ledger = value_ledger or LedgerValueMover(self.token_ledger, holding_account)
        self.events = EventRecorder(session, self._clock)

        self._releases = ReleaseCoordinator(
            session,
            self.value_ledger,
            clock=self._clock,
            policy=self._policy,
            holding_account=holding_account,
            event_recorder=self.events,
        )
        self._registry = VestingRegistry(
            session,
            self.access_control,
            self.value_ledger,
            clock=self._clock,
            policy=self._policy,
            holding_account=holding_account,
            event_recorder=self.events,
            release_coordinator=self._releases,
        )
        self._revocations = RevocationHandler(
            session,
            self.access_control,
            self.value_ledger,
            clock=self._clock,
            holding_account=holding_account,
            event_recorder=self.events,
        )

    @property
    def holding_account(self) -> str:
        return self._holding_account

    @property
    def policy(self) -> VestingPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    def _run(
        self,
        operation: str,
        fn: Callable[[], T],
        *,
        caller: str | None = None,
        beneficiary: str | None = None,
    ) -> T:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=caller,
            beneficiary=beneficiary,
            operation=operation,
        ):
            logger.info("vesting_operation_started")
            t0 = time.monotonic()
            try:
                result = fn()
                if self._auto_commit:
                    self._session.commit()
            except Exception:
                if self._auto_commit:
                    self._session.rollback()
                logger.error(
                    "vesting_operation_failed",
                    extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
                    exc_info=True,
                )
                raise
            logger.info(
                "vesting_operation_completed",
                extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
            )
            return result

    # ------------------------------------------------------------------
    # Grant lifecycle
    # ------------------------------------------------------------------

    def create_grant(
        self,
        caller: str,
        beneficiary: str,
        amount: int,
        start: int,
        cliff_seconds: int,
        vest_duration: int,
        revocable: bool,
    ) -> GrantResult:
        """Create and fund a grant; releases immediately if the cliff has passed."""
        request = GrantRequest(
            beneficiary=beneficiary,
            amount=amount,
            start=start,
            cliff_seconds=cliff_seconds,
            vest_duration=vest_duration,
            revocable=revocable,
        )
        return self._run(
            "create_grant",
            lambda: self._registry.create_grant(caller, request),
            caller=caller,
            beneficiary=beneficiary,
        )

    def release(self, caller: str) -> ReleaseResult:
        """Release the caller's own vested amount."""
        return self._run(
            "release",
            lambda: self._releases.release(caller),
            caller=caller,
            beneficiary=caller,
        )

    def release_for(self, account: str) -> ReleaseResult:
        """Release account's vested amount to account; anyone may call."""
        return self._run(
            "release_for",
            lambda: self._releases.release_for(account),
            beneficiary=account,
        )

    def revoke(self, caller: str, account: str) -> RevocationResult:
        """Revoke account's grant and return the unreleased remainder to the issuer."""
        return self._run(
            "revoke",
            lambda: self._revocations.revoke(caller, account),
            caller=caller,
            beneficiary=account,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_grant_balance_of(self, beneficiary: str) -> int:
        return self._registry.get_grant_balance_of(beneficiary)

    def get_grant_beneficiaries(self) -> list[str]:
        return self._registry.get_grant_beneficiaries()

    def get_grant(self, beneficiary: str) -> GrantSnapshot:
        return self._registry.get_grant(beneficiary)

    # ------------------------------------------------------------------
    # Access control
    # ------------------------------------------------------------------

    def authorize_address(self, caller: str, identity: str) -> None:
        self._run(
            "authorize_address",
            lambda: self.access_control.authorize_address(caller, identity),
            caller=caller,
        )

    def deauthorize_address(self, caller: str, identity: str) -> None:
        self._run(
            "deauthorize_address",
            lambda: self.access_control.deauthorize_address(caller, identity),
            caller=caller,
        )

    def pause(self, caller: str) -> None:
        self._run("pause", lambda: self.access_control.pause(caller), caller=caller)

    def unpause(self, caller: str) -> None:
        self._run("unpause", lambda: self.access_control.unpause(caller), caller=caller)
