"""
SequenceService -- gap-free ordering numbers for grants, lookup entries
and vesting notifications.

Each named sequence is one row in ``sequence_counters``.  Allocation locks
that row (``SELECT ... FOR UPDATE``), bumps it and flushes; the new value
becomes durable with the caller's commit and disappears with its rollback.
Values are never derived from ``MAX(seq) + 1``.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vesting_kernel.logging_config import get_logger
from vesting_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Allocates the next value of a named sequence inside the caller's
    transaction.  Never commits.
    """

    VESTING_GRANT = "vesting_grant"
    BENEFICIARY_LOOKUP = "beneficiary_lookup"
    VESTING_EVENT = "vesting_event"

    WELL_KNOWN = (VESTING_GRANT, BENEFICIARY_LOOKUP, VESTING_EVENT)

    def __init__(self, session: Session):
        self._session = session

    def _counter(self, name: str, *, lock: bool) -> SequenceCounter | None:
        stmt = select(SequenceCounter).where(SequenceCounter.name == name)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def _create_counter(self, name: str) -> SequenceCounter:
        """Insert a fresh counter at 0, tolerating a concurrent insert."""
        savepoint = self._session.begin_nested()
        counter = SequenceCounter(name=name, current_value=0)
        self._session.add(counter)
        try:
            self._session.flush()
        except IntegrityError:
            savepoint.rollback()
            logger.debug("sequence_counter_created_concurrently", extra={"sequence_name": name})
            existing = self._counter(name, lock=True)
            if existing is None:
                raise
            return existing
        savepoint.commit()
        return counter

    def next_value(self, sequence_name: str) -> int:
        """
        Return a value strictly greater than every earlier one for
        ``sequence_name``; the first allocation returns 1.

        The counter row stays locked until the caller's transaction ends.
        """
        counter = self._counter(sequence_name, lock=True)
        if counter is None:
            counter = self._create_counter(sequence_name)

        counter.current_value += 1
        self._session.flush()

        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Last allocated value, 0 if initialized but unused, None if unknown."""
        counter = self._counter(sequence_name, lock=False)
        return None if counter is None else counter.current_value

    def initialize_sequences(self) -> None:
        for name in self.WELL_KNOWN:
            if self._counter(name, lock=False) is None:
                self._session.add(SequenceCounter(name=name, current_value=0))
        self._session.flush()
