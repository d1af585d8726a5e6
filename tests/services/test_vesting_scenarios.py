"""
End-to-end grant lifecycle scenarios through the VestingService facade.
"""

import pytest

from tests.conftest import BENEFICIARY, DAY, ISSUER, PERIOD
from vesting_kernel.exceptions import GrantInactiveError


class TestMonthlyVesting:
    """1,200,000 over 360 days, no cliff, starting now."""

    def test_fresh_grant_holds_everything(self, vesting, make_grant):
        result = make_grant()

        assert result.grant.granted_amount == 1_200_000
        assert result.grant.released_amount == 0
        assert result.initial_release is not None
        assert result.initial_release.is_noop
        assert vesting.get_grant_balance_of(BENEFICIARY) == 1_200_000
        assert vesting.token_ledger.balance_of(vesting.holding_account) == 1_200_000

    def test_one_month_releases_one_twelfth(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(30 * DAY)

        result = vesting.release_for(BENEFICIARY)

        assert result.released == 100_000
        assert result.total_released == 100_000
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 100_000
        assert vesting.get_grant_balance_of(BENEFICIARY) == 1_100_000

    def test_end_of_schedule_releases_exact_total(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(30 * DAY)
        vesting.release_for(BENEFICIARY)
        clock.advance(330 * DAY)

        result = vesting.release_for(BENEFICIARY)

        assert result.released == 1_100_000
        assert result.total_released == 1_200_000
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 1_200_000
        assert vesting.token_ledger.balance_of(vesting.holding_account) == 0
        assert vesting.get_grant_balance_of(BENEFICIARY) == 0

    def test_release_after_full_vesting_is_noop(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(400 * DAY)
        vesting.release_for(BENEFICIARY)

        result = vesting.release_for(BENEFICIARY)

        assert result.is_noop
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 1_200_000

    def test_monthly_releases_sum_to_granted(self, vesting, make_grant, clock):
        make_grant(amount=1_000_003)
        released = []
        for _ in range(12):
            clock.advance(PERIOD)
            released.append(vesting.release_for(BENEFICIARY).released)

        assert released[:11] == [83_333] * 11
        assert sum(released) == 1_000_003


class TestEagerRelease:
    def test_past_cliff_releases_during_create(self, vesting, make_grant, clock):
        start = clock.timestamp() - 100 * DAY

        result = make_grant(start=start, cliff_seconds=60 * DAY)

        # 100 days is three whole periods of 100,000
        assert result.initial_release.released == 300_000
        assert result.grant.released_amount == 300_000
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 300_000
        assert vesting.get_grant_balance_of(BENEFICIARY) == 900_000

    def test_future_cliff_does_not_release(self, vesting, make_grant):
        result = make_grant(cliff_seconds=90 * DAY)

        assert result.initial_release is None
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 0

    def test_schedule_already_over_releases_everything(self, vesting, make_grant, clock):
        result = make_grant(start=clock.timestamp() - 400 * DAY)

        assert result.initial_release.released == 1_200_000
        assert vesting.get_grant_balance_of(BENEFICIARY) == 0


class TestRevocationScenario:
    def test_issuer_recovers_unreleased_remainder(self, vesting, make_grant, clock):
        make_grant(amount=1_000_000, vest_duration=300 * DAY)
        clock.advance(3 * PERIOD)
        assert vesting.release_for(BENEFICIARY).released == 300_000
        issuer_before = vesting.token_ledger.balance_of(ISSUER)

        result = vesting.revoke(ISSUER, BENEFICIARY)

        assert result.returned_amount == 700_000
        assert result.released_amount == 300_000
        assert vesting.token_ledger.balance_of(ISSUER) == issuer_before + 700_000
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 300_000
        assert vesting.token_ledger.balance_of(vesting.holding_account) == 0

        clock.advance(PERIOD)
        with pytest.raises(GrantInactiveError):
            vesting.release_for(BENEFICIARY)

    def test_vested_but_unreleased_value_is_forfeited(self, vesting, make_grant, clock):
        make_grant(amount=1_000_000, vest_duration=300 * DAY)
        clock.advance(5 * PERIOD)

        result = vesting.revoke(ISSUER, BENEFICIARY)

        assert result.returned_amount == 1_000_000
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 0
