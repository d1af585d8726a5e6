"""Hostile ValueLedger implementations for adversarial tests."""

from collections.abc import Callable

import pytest

from vesting_kernel.domain.value_ledger import ValueLedger
from vesting_kernel.services.vesting_service import VestingService


class ReentrantLedger(ValueLedger):
    """
    Forwards to a real ledger, but first calls back into the kernel once
    whenever value leaves the holding account.
    """

    def __init__(self, inner: ValueLedger, holding_account: str):
        self._inner = inner
        self._holding_account = holding_account
        self.callback: Callable[[str, str, int], object] | None = None
        self.callback_results: list[object] = []
        self._depth = 0

    def move_value(self, source: str, destination: str, amount: int) -> bool:
        if source == self._holding_account and self.callback and self._depth == 0:
            self._depth += 1
            try:
                self.callback_results.append(self.callback(source, destination, amount))
            except Exception as exc:
                self.callback_results.append(exc)
            finally:
                self._depth -= 1
        return self._inner.move_value(source, destination, amount)


class RefusingLedger(ValueLedger):
    """Forwards to a real ledger but refuses moves to chosen destinations."""

    def __init__(self, inner: ValueLedger):
        self._inner = inner
        self.refuse_destinations: set[str] = set()

    def move_value(self, source: str, destination: str, amount: int) -> bool:
        if destination in self.refuse_destinations:
            return False
        return self._inner.move_value(source, destination, amount)


def _service_with_ledger(vesting, session, clock, policy, ledger, auto_commit):
    return VestingService(
        session,
        clock=clock,
        policy=policy,
        access_control=vesting.access_control,
        value_ledger=ledger,
        token_ledger=vesting.token_ledger,
        holding_account=vesting.holding_account,
        auto_commit=auto_commit,
    )


@pytest.fixture
def reentrant(vesting, session, clock, policy):
    """(service, ledger) where the service runs on a ReentrantLedger."""
    ledger = ReentrantLedger(vesting.value_ledger, vesting.holding_account)
    service = _service_with_ledger(vesting, session, clock, policy, ledger, auto_commit=False)
    return service, ledger


@pytest.fixture
def refusing(vesting, session, clock, policy):
    """(service, ledger) where the service runs on a RefusingLedger."""
    ledger = RefusingLedger(vesting.value_ledger)
    service = _service_with_ledger(vesting, session, clock, policy, ledger, auto_commit=True)
    return service, ledger
