"""
Config -> Kernel Bridges.

Functions that convert a VestingConfiguration into kernel inputs.  These
live in vesting_config (the producer) because the kernel must never
import vesting_config.

Usage:
    config = get_active_config()
    service = build_vesting_service(session, config, clock=SystemClock())
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from vesting_config.schema import VestingConfiguration
from vesting_kernel.domain.clock import Clock
from vesting_kernel.domain.policy import VestingPolicy
from vesting_kernel.services.token_ledger_service import TokenLedgerService
from vesting_kernel.services.vesting_service import VestingService


def build_vesting_policy(config: VestingConfiguration) -> VestingPolicy:
    """VestingPolicy from the configuration's vesting section."""
    return VestingPolicy(
        period_length=config.vesting.period_length_seconds,
        start_time_floor=config.vesting.start_time_floor,
        max_amount=config.vesting.max_grant_amount,
    )


def build_token_ledger(
    session: Session,
    config: VestingConfiguration,
    clock: Clock | None = None,
) -> TokenLedgerService:
    """TokenLedgerService sized from the configuration's token section."""
    return TokenLedgerService(
        session,
        clock=clock,
        total_supply=config.token.total_supply,
        symbol=config.token.symbol,
    )


def build_vesting_service(
    session: Session,
    config: VestingConfiguration,
    clock: Clock | None = None,
    auto_commit: bool = True,
) -> VestingService:
    """Fully wired VestingService for one session."""
    return VestingService(
        session,
        clock=clock,
        policy=build_vesting_policy(config),
        token_ledger=build_token_ledger(session, config, clock),
        holding_account=config.token.holding_account,
        auto_commit=auto_commit,
    )
