"""
A ValueLedger that calls back into the kernel mid-transfer must not be
able to extract more than the grant holds.
"""

from tests.conftest import BENEFICIARY, ISSUER, PERIOD
from vesting_kernel.domain.dtos import ReleaseResult, RevocationResult
from vesting_kernel.exceptions import GrantInactiveError


def test_reentrant_release_releases_once(vesting, reentrant, make_grant, clock):
    service, ledger = reentrant
    make_grant()
    clock.advance(PERIOD)
    ledger.callback = lambda source, destination, amount: service.release_for(destination)

    result = service.release_for(BENEFICIARY)

    inner = ledger.callback_results[0]
    assert isinstance(inner, ReleaseResult)
    assert inner.is_noop
    assert inner.total_released == 100_000
    assert result.released == 100_000
    assert vesting.token_ledger.balance_of(BENEFICIARY) == 100_000
    assert vesting.get_grant(BENEFICIARY).released_amount == 100_000


def test_reentrant_revoke_during_release_conserves_value(vesting, reentrant, make_grant, clock):
    service, ledger = reentrant
    make_grant()
    clock.advance(PERIOD)
    issuer_before = vesting.token_ledger.balance_of(ISSUER)
    ledger.callback = lambda source, destination, amount: service.revoke(ISSUER, destination)

    service.release_for(BENEFICIARY)

    revocation = ledger.callback_results[0]
    assert isinstance(revocation, RevocationResult)
    # The increment was visible to the revocation
    assert revocation.returned_amount == 1_100_000
    assert vesting.token_ledger.balance_of(ISSUER) == issuer_before + 1_100_000
    assert vesting.token_ledger.balance_of(BENEFICIARY) == 100_000
    assert vesting.token_ledger.balance_of(vesting.holding_account) == 0


def test_reentrant_double_revoke_is_rejected(vesting, reentrant, make_grant):
    service, ledger = reentrant
    make_grant()
    issuer_before = vesting.token_ledger.balance_of(ISSUER)
    ledger.callback = lambda source, destination, amount: service.revoke(ISSUER, BENEFICIARY)

    result = service.revoke(ISSUER, BENEFICIARY)

    assert isinstance(ledger.callback_results[0], GrantInactiveError)
    assert result.returned_amount == 1_200_000
    assert vesting.token_ledger.balance_of(ISSUER) == issuer_before + 1_200_000
    assert vesting.token_ledger.balance_of(vesting.holding_account) == 0


def test_reentrant_release_after_revoke_is_rejected(vesting, reentrant, make_grant, clock):
    service, ledger = reentrant
    make_grant()
    clock.advance(PERIOD)
    ledger.callback = lambda source, destination, amount: service.release_for(BENEFICIARY)

    service.revoke(ISSUER, BENEFICIARY)

    assert isinstance(ledger.callback_results[0], GrantInactiveError)
    assert vesting.token_ledger.balance_of(BENEFICIARY) == 0
