"""
Shared fixtures.

Tests run against in-memory SQLite unless DATABASE_URL points at a
PostgreSQL database.  Tables are created once per run; each test works
inside an outer transaction that is rolled back afterwards, so commits
made by the services never leak between tests.

Time is frozen at T0 (2024-01-01) and only moves through ``clock.advance``.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from vesting_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from vesting_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from vesting_kernel.domain.clock import DeterministicClock
from vesting_kernel.domain.policy import DEFAULT_PERIOD_LENGTH, SECONDS_PER_DAY, VestingPolicy
from vesting_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from vesting_kernel.services.token_ledger_service import DEFAULT_TOTAL_SUPPLY
from vesting_kernel.services.vesting_service import VestingService

DEFAULT_DATABASE_URL = "sqlite://"

# 2024-01-01T00:00:00Z
T0 = 1_704_067_200
DAY = SECONDS_PER_DAY
PERIOD = DEFAULT_PERIOD_LENGTH

OWNER = "0x" + "0a" * 20
ISSUER = "0x" + "1f" * 20
OTHER_ISSUER = "0x" + "2e" * 20
BENEFICIARY = "0x" + "b0" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
STRANGER = "0x" + "5c" * 20

# Left with the owner so the issuer's balance is a round number
OWNER_RESERVE = 1_000 * 10**18


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _json_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _fresh_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Returns a callable yielding every kernel log line emitted so far,
    decoded from JSON:

        records = captured_logs()
        assert "grant_released" in [r["message"] for r in records]
    """
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(StructuredFormatter())
    kernel_logger = logging.getLogger("vesting_kernel")
    kernel_logger.addHandler(handler)
    try:
        yield lambda: [json.loads(line) for line in buffer.getvalue().splitlines() if line]
    finally:
        kernel_logger.removeHandler(handler)


# -----------------------------------------------------------------------------
# Database
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables once per session; listeners stay registered."""
    drop_tables()
    create_tables()
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()
    drop_tables()


@pytest.fixture
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """
    Database session that never outlives its test.

    The session joins an outer transaction on a dedicated connection;
    ``session.commit()`` only releases a savepoint, and teardown rolls
    the outer transaction back.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# -----------------------------------------------------------------------------
# Kernel fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock.at_timestamp(T0)


@pytest.fixture
def policy() -> VestingPolicy:
    return VestingPolicy()


@pytest.fixture
def vesting(session, clock, policy) -> VestingService:
    """
    VestingService ready for grants.

    OWNER administers access control; ISSUER is authorized, holds the
    whole supply except OWNER_RESERVE, and has approved the holding
    account for all of it.
    """
    service = VestingService(session, clock=clock, policy=policy)
    service.access_control.initialize(OWNER)
    service.token_ledger.mint_initial_supply(
        {ISSUER: DEFAULT_TOTAL_SUPPLY - OWNER_RESERVE, OWNER: OWNER_RESERVE}
    )
    service.token_ledger.approve(ISSUER, service.holding_account, DEFAULT_TOTAL_SUPPLY)
    session.commit()
    service.authorize_address(OWNER, ISSUER)
    return service


@pytest.fixture
def fund_issuer(vesting, session):
    """Give another identity tokens and approve the holding account."""

    def _fund(identity: str, amount: int) -> None:
        vesting.token_ledger.transfer(ISSUER, identity, amount)
        vesting.token_ledger.approve(identity, vesting.holding_account, amount)
        session.commit()

    return _fund


@pytest.fixture
def make_grant(vesting, clock):
    """
    Create a grant with sensible defaults.

    Defaults: 1,200,000 units from ISSUER to BENEFICIARY, starting now,
    no cliff, 360 days, revocable.
    """

    def _make(
        beneficiary: str = BENEFICIARY,
        amount: int = 1_200_000,
        start: int | None = None,
        cliff_seconds: int = 0,
        vest_duration: int = 360 * DAY,
        revocable: bool = True,
        caller: str = ISSUER,
    ):
        return vesting.create_grant(
            caller,
            beneficiary,
            amount,
            clock.timestamp() if start is None else start,
            cliff_seconds,
            vest_duration,
            revocable,
        )

    return _make
