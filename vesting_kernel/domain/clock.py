"""
Clock -- injectable source of "now" for schedule arithmetic.

Grant schedules are expressed in whole unix seconds, so the primitive
every clock provides is ``timestamp()``.  ``now()`` / ``now_utc()`` are
derived from it for logging and DTO timestamps.

SystemClock is the only place in the kernel that reads wall-clock time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone

# 2024-01-01T00:00:00Z
DEFAULT_TEST_TIMESTAMP = 1_704_067_200


class Clock(ABC):
    """Time source handed to every service that needs the current time."""

    @abstractmethod
    def timestamp(self) -> int:
        """Current time in whole unix seconds."""
        ...

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp(), tz=timezone.utc)

    def now_utc(self) -> datetime:
        return self.now()


class SystemClock(Clock):
    """Wall-clock time, truncated to the second."""

    def timestamp(self) -> int:
        return int(datetime.now(timezone.utc).timestamp())


class DeterministicClock(Clock):
    """
    Manually driven clock for tests and replays.

    Time only moves when ``advance()`` or ``set_time()`` is called, so
    two reads in the same operation always agree.
    """

    def __init__(self, fixed_time: datetime | None = None):
        if fixed_time is None:
            self._seconds = DEFAULT_TEST_TIMESTAMP
        else:
            self._seconds = _to_seconds(fixed_time)

    @classmethod
    def at_timestamp(cls, unix_seconds: int) -> "DeterministicClock":
        clock = cls()
        clock._seconds = int(unix_seconds)
        return clock

    def timestamp(self) -> int:
        return self._seconds

    def set_time(self, time: datetime | int) -> None:
        """Jump to an absolute instant (datetime or unix seconds)."""
        self._seconds = time if isinstance(time, int) else _to_seconds(time)

    def advance(self, seconds: int = 1) -> None:
        if seconds < 0:
            raise ValueError(f"clock cannot move backwards ({seconds}s)")
        self._seconds += seconds


def _to_seconds(moment: datetime) -> int:
    if moment.tzinfo is None:
        raise ValueError("clock times must be timezone-aware")
    return int(moment.timestamp())
