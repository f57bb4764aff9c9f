"""
Clock - injectable time source.

Lockout windows and the "current month" are both time-based, so the guard
and the ledger receive a Clock instead of calling datetime.now() directly.
SystemClock is the only place that reads the wall clock.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time (timezone-aware)."""
        ...

    def today(self) -> date:
        """Get the current calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """Production clock that returns actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone()


class FixedClock(Clock):
    """
    Test clock with controlled time.

    now() returns the same value on repeated calls until
    advance() or set_time() is called.
    """

    def __init__(self, fixed_time: Optional[datetime] = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc
        )

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = time

    def advance(self, seconds: float = 0, minutes: float = 0) -> datetime:
        """Move the clock forward and return the new time."""
        self._fixed_time += timedelta(seconds=seconds, minutes=minutes)
        return self._fixed_time
