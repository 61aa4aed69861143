"""
Clock -- Injectable source of "now" for the stock history writer.

Responsibility:
    Supplies the server-authoritative timestamp stamped on every appended
    stock movement, so no service calls ``datetime.now()`` itself and a
    recorded scenario can be written again with identical timestamps.

Architecture position:
    Kernel > Domain -- pure functional core.  SystemClock is the one
    sanctioned read of wall-clock time.

Invariants enforced:
    - ``now_utc()`` returns a NAIVE datetime in UTC, the form stock_history
      stores and the replay engine compares.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


def _as_naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class Clock(ABC):
    """Time source received by constructor injection."""

    @abstractmethod
    def now_utc(self) -> datetime:
        """Current time as naive UTC."""
        ...


class SystemClock(Clock):
    """Wall-clock time."""

    def now_utc(self) -> datetime:
        return _as_naive_utc(datetime.now(timezone.utc))


class DeterministicClock(Clock):
    """
    Test clock that only moves when told to.

    Starts at 2024-01-01 12:00 UTC unless given a start time.  Aware start
    times are converted to naive UTC.
    """

    def __init__(self, start: datetime | None = None):
        self._current = _as_naive_utc(start or datetime(2024, 1, 1, 12, 0, 0))

    def now_utc(self) -> datetime:
        return self._current

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)
