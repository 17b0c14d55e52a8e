"""
Ports (interfaces) for the scheduling core.

The only collaborator the core reads from is a wall-clock time source.
It is injected so that scheduling stays deterministic under test.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone, tzinfo


class Clock(ABC):
    """
    Port for reading the current instant.

    Implementations:
        - SystemClock: Reads the system clock in a configured timezone.
        - FixedClock: Always returns the same instant (tests, replays).
    """

    @abstractmethod
    def now(self) -> datetime:
        """
        Return the current instant as a timezone-aware datetime.

        The timezone of the returned value is the learner's local timezone;
        day boundaries and optimal review times are computed in it.
        """
        pass


class SystemClock(Clock):
    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock(Clock):
    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant
