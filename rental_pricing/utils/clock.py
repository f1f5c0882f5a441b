"""
Time source for every "today" comparison.

All past-date checks (prices, overrides, availability, copy targets) ask the
same clock, so a request near midnight sees one consistent boundary and
tests can freeze time.
"""

from datetime import date, datetime, timezone


class SystemClock:
    """Wall clock in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        """Today at UTC midnight, as a calendar date."""
        return self.now().date()


class FixedClock(SystemClock):
    """Clock frozen at a given instant (naive values are taken as UTC)."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._instant


system_clock = SystemClock()


def get_clock() -> SystemClock:
    """FastAPI dependency; tests override it with a FixedClock."""
    return system_clock
