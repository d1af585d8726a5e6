"""
Revocation: issuer-only, final, and returns exactly the unreleased remainder.
"""

import pytest

from tests.conftest import ALICE, BENEFICIARY, ISSUER, OTHER_ISSUER, OWNER, PERIOD
from vesting_kernel.domain.identity import ZERO_ADDRESS
from vesting_kernel.exceptions import (
    GrantInactiveError,
    GrantNotFoundError,
    GrantNotRevocableError,
    InvalidIdentityError,
    SystemPausedError,
    UnauthorizedError,
)
from vesting_kernel.selectors.grant_selector import GrantSelector


class TestRevokePreconditions:
    def test_null_identity(self, vesting):
        with pytest.raises(InvalidIdentityError):
            vesting.revoke(ISSUER, ZERO_ADDRESS)

    def test_no_grant(self, vesting):
        with pytest.raises(GrantNotFoundError):
            vesting.revoke(ISSUER, ALICE)

    def test_not_revocable(self, vesting, make_grant):
        make_grant(revocable=False)
        with pytest.raises(GrantNotRevocableError):
            vesting.revoke(ISSUER, BENEFICIARY)
        assert vesting.get_grant(BENEFICIARY).active

    def test_only_issuer(self, vesting, make_grant):
        make_grant()
        with pytest.raises(UnauthorizedError):
            vesting.revoke(OTHER_ISSUER, BENEFICIARY)

    def test_owner_is_not_the_issuer(self, vesting, make_grant):
        make_grant()
        with pytest.raises(UnauthorizedError):
            vesting.revoke(OWNER, BENEFICIARY)

    def test_paused(self, vesting, make_grant):
        make_grant()
        vesting.pause(OWNER)
        with pytest.raises(SystemPausedError):
            vesting.revoke(ISSUER, BENEFICIARY)
        assert vesting.get_grant(BENEFICIARY).active

    def test_issuer_checked_before_pause(self, vesting, make_grant):
        make_grant()
        vesting.pause(OWNER)
        with pytest.raises(UnauthorizedError):
            vesting.revoke(OTHER_ISSUER, BENEFICIARY)

    def test_double_revoke(self, vesting, make_grant):
        make_grant()
        vesting.revoke(ISSUER, BENEFICIARY)
        with pytest.raises(GrantInactiveError):
            vesting.revoke(ISSUER, BENEFICIARY)

    def test_deauthorized_issuer_may_still_revoke(self, vesting, make_grant):
        make_grant()
        vesting.deauthorize_address(OWNER, ISSUER)
        result = vesting.revoke(ISSUER, BENEFICIARY)
        assert result.returned_amount == 1_200_000


class TestRevokeEffects:
    def test_revoke_before_any_release(self, vesting, make_grant):
        make_grant()
        issuer_before = vesting.token_ledger.balance_of(ISSUER)

        result = vesting.revoke(ISSUER, BENEFICIARY)

        assert result.returned_amount == 1_200_000
        assert result.issuer == ISSUER
        assert vesting.token_ledger.balance_of(ISSUER) == issuer_before + 1_200_000

    def test_revoke_after_full_release_moves_nothing(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(400 * 86_400)
        vesting.release_for(BENEFICIARY)
        issuer_before = vesting.token_ledger.balance_of(ISSUER)

        result = vesting.revoke(ISSUER, BENEFICIARY)

        assert result.returned_amount == 0
        assert vesting.token_ledger.balance_of(ISSUER) == issuer_before
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 1_200_000

    def test_released_amount_untouched(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(PERIOD)
        vesting.release_for(BENEFICIARY)

        vesting.revoke(ISSUER, BENEFICIARY)

        grant = vesting.get_grant(BENEFICIARY)
        assert grant.released_amount == 100_000
        assert not grant.active

    def test_revoke_notification(self, vesting, make_grant, clock, session):
        make_grant()
        clock.advance(PERIOD)
        vesting.release_for(BENEFICIARY)
        vesting.revoke(ISSUER, BENEFICIARY)

        events = GrantSelector(session).list_events(BENEFICIARY)
        assert [e.event_type for e in events] == ["grant", "release", "revoke"]
        assert events[-1].issuer == ISSUER
        assert events[-1].amount == 1_100_000

    def test_other_grants_unaffected(self, vesting, make_grant, clock):
        make_grant(beneficiary=ALICE)
        make_grant()
        vesting.revoke(ISSUER, BENEFICIARY)
        clock.advance(PERIOD)
        assert vesting.release_for(ALICE).released == 100_000
