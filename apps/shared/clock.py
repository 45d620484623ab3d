"""
UTC clock

Every date comparison in the API (today, vote day, token expiry) goes
through a Clock so tests can pin the current time.
"""

from datetime import date, datetime, timezone


class Clock:
    """Current UTC time as naive datetimes, matching the stored columns."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def get_clock() -> Clock:
    return Clock()
