"""Injected sources of "today"."""

from datetime import UTC, date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Supplies the current calendar date."""

    def today(self) -> date: ...


class SystemClock:
    """Clock reading the system time in the practice's timezone."""

    def __init__(self, timezone: str = "UTC"):
        self.tz = ZoneInfo(timezone)

    def today(self) -> date:
        return datetime.now(UTC).astimezone(self.tz).date()


class FixedClock:
    """Clock pinned to one date, for tests and backfills."""

    def __init__(self, current: date):
        self.current = current

    def today(self) -> date:
        return self.current
