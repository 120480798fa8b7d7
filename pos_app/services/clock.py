"""Wall-clock abstraction for time-dependent booking rules"""

from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime:
        """Current naive local time in the restaurant's timezone"""
        ...


class SystemClock:
    """Reads the system clock in the restaurant's timezone"""

    def __init__(self, timezone: str = "UTC"):
        self.timezone = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone).replace(tzinfo=None)
