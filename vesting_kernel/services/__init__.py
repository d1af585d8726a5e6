"""Kernel services -- the imperative shell around the pure domain."""

from vesting_kernel.services.access_control_service import AccessControlService
from vesting_kernel.services.event_recorder import EventRecorder
from vesting_kernel.services.release_coordinator import ReleaseCoordinator
from vesting_kernel.services.revocation_handler import RevocationHandler
from vesting_kernel.services.sequence_service import SequenceService
from vesting_kernel.services.token_ledger_service import LedgerValueMover, TokenLedgerService
from vesting_kernel.services.vesting_registry import VestingRegistry
from vesting_kernel.services.vesting_service import VestingService

__all__ = [
    "AccessControlService",
    "EventRecorder",
    "LedgerValueMover",
    "ReleaseCoordinator",
    "RevocationHandler",
    "SequenceService",
    "TokenLedgerService",
    "VestingRegistry",
    "VestingService",
]
