"""Clock capability injected into services and routers.

Every "now" and "today" read goes through a Clock so that timer maths and
date resolution can be pinned in tests.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from chorecycle.core.config import settings


class Clock:
    """Wall clock in UTC with the family's local calendar day."""

    def __init__(self, tz_name: str = settings.TIMEZONE):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()


class FixedClock(Clock):
    """Clock pinned to a given instant; `advance` moves it forward."""

    def __init__(self, instant: datetime, tz_name: str = "UTC"):
        super().__init__(tz_name)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance(self, **delta) -> datetime:
        self.instant = self.instant + timedelta(**delta)
        return self.instant


system_clock = Clock()


def get_clock() -> Clock:
    """Clock dependency."""
    return system_clock
