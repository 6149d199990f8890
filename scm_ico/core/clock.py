"""Time sources for the sale state machine.

Operations read the clock once and use that single timestamp for every
decision they make.
"""

import time
from abc import ABC, abstractmethod

from .types import Timestamp


class Clock(ABC):
    """Abstract source of the current time."""

    @abstractmethod
    def now(self) -> Timestamp:
        """Return the current Unix timestamp in seconds."""
        pass


class SystemClock(Clock):
    """Wall-clock time."""

    def now(self) -> Timestamp:
        return int(time.time())


class ManualClock(Clock):
    """
    Clock that only moves when told to.

    Usage:
        clock = ManualClock(1_700_000_000)
        clock.advance(120)
        clock.set(1_700_000_500)
    """

    def __init__(self, start: Timestamp = 0):
        self._now = start

    def now(self) -> Timestamp:
        return self._now

    def advance(self, seconds: int) -> Timestamp:
        """Move time forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards by {seconds}s")
        self._now += seconds
        return self._now

    def set(self, timestamp: Timestamp) -> None:
        """Jump to an absolute timestamp (like setting the next block time)."""
        if timestamp < self._now:
            raise ValueError(f"Cannot set time backwards to {timestamp}")
        self._now = timestamp
