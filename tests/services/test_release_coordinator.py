"""
Release: preconditions, idempotence and value routing.
"""

import pytest

from tests.conftest import ALICE, BENEFICIARY, DAY, ISSUER, OWNER, PERIOD, STRANGER
from vesting_kernel.domain.identity import ZERO_ADDRESS
from vesting_kernel.exceptions import (
    BeforeCliffError,
    GrantInactiveError,
    GrantNotFoundError,
    InvalidIdentityError,
)
from vesting_kernel.selectors.grant_selector import GrantSelector


class TestReleasePreconditions:
    def test_null_identity(self, vesting):
        with pytest.raises(InvalidIdentityError):
            vesting.release_for(ZERO_ADDRESS)

    def test_no_grant(self, vesting):
        with pytest.raises(GrantNotFoundError):
            vesting.release_for(ALICE)

    def test_before_cliff(self, vesting, make_grant, clock):
        make_grant(cliff_seconds=90 * DAY)
        clock.advance(89 * DAY)

        with pytest.raises(BeforeCliffError) as exc_info:
            vesting.release_for(BENEFICIARY)
        assert exc_info.value.cliff_time == clock.timestamp() + DAY
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 0

    def test_at_cliff(self, vesting, make_grant, clock):
        make_grant(cliff_seconds=90 * DAY)
        clock.advance(90 * DAY)
        assert vesting.release_for(BENEFICIARY).released == 300_000

    def test_revoked_grant(self, vesting, make_grant):
        make_grant()
        vesting.revoke(ISSUER, BENEFICIARY)
        with pytest.raises(GrantInactiveError):
            vesting.release_for(BENEFICIARY)


class TestReleaseEffects:
    def test_anyone_may_release_value_goes_to_beneficiary(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(PERIOD)

        # release_for carries no caller; STRANGER triggering it gains nothing
        vesting.release_for(BENEFICIARY)

        assert vesting.token_ledger.balance_of(BENEFICIARY) == 100_000
        assert vesting.token_ledger.balance_of(STRANGER) == 0

    def test_release_uses_callers_own_grant(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(PERIOD)
        result = vesting.release(BENEFICIARY)
        assert result.beneficiary == BENEFICIARY
        assert result.released == 100_000

    def test_release_for_caller_without_grant(self, vesting, make_grant, clock):
        make_grant()
        clock.advance(PERIOD)
        with pytest.raises(GrantNotFoundError):
            vesting.release(STRANGER)

    def test_second_release_in_same_period_is_noop(self, vesting, make_grant, clock, session):
        make_grant()
        clock.advance(PERIOD + DAY)
        first = vesting.release_for(BENEFICIARY)
        clock.advance(DAY)
        second = vesting.release_for(BENEFICIARY)

        assert first.released == 100_000
        assert second.is_noop
        assert second.total_released == 100_000
        assert vesting.token_ledger.balance_of(BENEFICIARY) == 100_000
        releases = [
            e for e in GrantSelector(session).list_events(BENEFICIARY)
            if e.event_type == "release"
        ]
        assert len(releases) == 1

    def test_release_while_paused(self, vesting, make_grant, clock):
        make_grant()
        vesting.pause(OWNER)
        clock.advance(PERIOD)
        assert vesting.release_for(BENEFICIARY).released == 100_000

    def test_released_amount_is_monotonic(self, vesting, make_grant, clock):
        make_grant()
        totals = []
        for _ in range(24):
            clock.advance(PERIOD // 2)
            totals.append(vesting.release_for(BENEFICIARY).total_released)
        assert totals == sorted(totals)
        assert totals[-1] == 1_200_000

    def test_release_notification(self, vesting, make_grant, clock, session):
        make_grant()
        clock.advance(2 * PERIOD)
        vesting.release_for(BENEFICIARY)
        event = GrantSelector(session).list_events(BENEFICIARY)[-1]
        assert event.event_type == "release"
        assert event.amount == 200_000
        assert event.issuer is None

    def test_release_logs(self, vesting, make_grant, clock, captured_logs):
        make_grant()
        clock.advance(PERIOD)
        vesting.release_for(BENEFICIARY)

        logs = captured_logs()
        released = [r for r in logs if r["message"] == "grant_released"]
        assert released[-1]["released"] == "100000"
        assert released[-1]["operation"] == "release_for"
        completed = [r for r in logs if r["message"] == "vesting_operation_completed"]
        assert completed[-1]["operation"] == "release_for"
        assert "duration_ms" in completed[-1]

    def test_failed_release_logs_error_code(self, vesting, make_grant, captured_logs):
        make_grant(cliff_seconds=30 * DAY)
        with pytest.raises(BeforeCliffError):
            vesting.release_for(BENEFICIARY)

        failed = [r for r in captured_logs() if r["message"] == "vesting_operation_failed"]
        assert failed[-1]["exc_code"] == "BEFORE_CLIFF"
        assert failed[-1]["level"] == "ERROR"
