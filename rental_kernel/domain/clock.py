"""
Clock -- injectable time source.

Responsibility:
    Repositories and services that need "now" (ongoing rentals, unreturned
    overdue contracts, signing and return timestamps) receive a Clock through
    their constructor instead of calling ``datetime.now()`` directly.

Architecture position:
    Kernel > Domain -- SystemClock is the one sanctioned I/O boundary for
    time. The rules engine never holds a clock; callers pass ``now`` in.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Guarantees:
        - ``now()`` returns a timezone-aware UTC ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current UTC time."""
        ...


class SystemClock(Clock):
    """Production clock that returns actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    ``now()`` returns the same value on repeated calls until ``advance()``
    or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        if self._fixed_time.tzinfo is None:
            raise ValueError("DeterministicClock requires a timezone-aware time")
        self._advance = timedelta(0)

    def now(self) -> datetime:
        return (self._fixed_time + self._advance).astimezone(timezone.utc)

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        if time.tzinfo is None:
            raise ValueError("DeterministicClock requires a timezone-aware time")
        self._fixed_time = time
        self._advance = timedelta(0)

    def advance(self, seconds: int = 0, minutes: int = 0, hours: int = 0) -> None:
        """Advance the clock by the given amount."""
        self._advance += timedelta(seconds=seconds, minutes=minutes, hours=hours)
