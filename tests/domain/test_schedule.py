"""Grant term validation: each bad input maps to exactly one failure."""

import pytest

from vesting_kernel.domain.policy import VestingPolicy
from vesting_kernel.domain.schedule import GrantSchedule, validate_grant_terms
from vesting_kernel.exceptions import InvalidAmountError, InvalidScheduleError

DAY = 86_400
START = 1_704_067_200
POLICY = VestingPolicy()


def test_valid_terms_build_schedule():
    schedule = validate_grant_terms(1_000, START, 90 * DAY, 360 * DAY, POLICY)
    assert schedule == GrantSchedule(
        granted_amount=1_000,
        start_time=START,
        cliff_time=START + 90 * DAY,
        end_time=START + 360 * DAY,
    )


@pytest.mark.parametrize("amount", [0, -1, True, 1.5, "100"])
def test_rejects_bad_amounts(amount):
    with pytest.raises(InvalidAmountError):
        validate_grant_terms(amount, START, 0, 360 * DAY, POLICY)


def test_rejects_amount_above_policy_maximum():
    policy = VestingPolicy(max_amount=1_000)
    with pytest.raises(InvalidAmountError):
        validate_grant_terms(1_001, START, 0, 360 * DAY, policy)


def test_accepts_uint256_max():
    schedule = validate_grant_terms(2**256 - 1, START, 0, 360 * DAY, POLICY)
    assert schedule.granted_amount == 2**256 - 1


def test_rejects_start_before_floor():
    with pytest.raises(InvalidScheduleError) as exc_info:
        validate_grant_terms(1_000, POLICY.start_time_floor - 1, 0, 360 * DAY, POLICY)
    assert exc_info.value.params["start"] == POLICY.start_time_floor - 1


def test_accepts_start_at_floor():
    validate_grant_terms(1_000, POLICY.start_time_floor, 0, 360 * DAY, POLICY)


@pytest.mark.parametrize("duration", [0, -DAY])
def test_rejects_non_positive_duration(duration):
    with pytest.raises(InvalidScheduleError):
        validate_grant_terms(1_000, START, 0, duration, POLICY)


def test_rejects_duration_shorter_than_one_period():
    with pytest.raises(InvalidScheduleError) as exc_info:
        validate_grant_terms(1_000, START, 0, 29 * DAY, POLICY)
    assert exc_info.value.params["period_length"] == POLICY.period_length


@pytest.mark.parametrize("cliff", [-1, 360 * DAY, 361 * DAY])
def test_rejects_cliff_outside_duration(cliff):
    with pytest.raises(InvalidScheduleError):
        validate_grant_terms(1_000, START, cliff, 360 * DAY, POLICY)


def test_amount_checked_before_schedule():
    with pytest.raises(InvalidAmountError):
        validate_grant_terms(0, 0, -1, 0, POLICY)


def test_with_released_keeps_schedule():
    schedule = validate_grant_terms(1_000, START, 0, 360 * DAY, POLICY)
    updated = schedule.with_released(250)
    assert updated.released_amount == 250
    assert updated.remaining_amount == 750
    assert updated.end_time == schedule.end_time


@pytest.mark.parametrize(
    "start, cliff, duration, bad_term",
    [
        (float(START), 0, 360 * DAY, "start"),
        (START, True, 360 * DAY, "cliff_seconds"),
        (START, 0, 360.0 * DAY, "vest_duration"),
        (START, 0, str(360 * DAY), "vest_duration"),
    ],
)
def test_rejects_non_integer_schedule_terms(start, cliff, duration, bad_term):
    with pytest.raises(InvalidScheduleError) as exc_info:
        validate_grant_terms(1_000, start, cliff, duration, POLICY)
    assert bad_term in exc_info.value.params
