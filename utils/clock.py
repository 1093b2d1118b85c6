"""
utils/clock.py
--------------
Injected "today" providers. Services read the date once per logical
operation from a clock instead of calling ``date.today()`` ad hoc.
"""

from datetime import date, datetime
from dateutil import tz

from config import APP_TIMEZONE


class SystemClock:
    """Wall-clock date in the configured timezone."""

    def __init__(self, tz_name: str = APP_TIMEZONE):
        self.tz = tz.gettz(tz_name)
        if self.tz is None:
            raise ValueError(f"Unknown timezone: {tz_name!r}")

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock:
    """Always returns the same date. Used by tests and replays."""

    def __init__(self, fixed: date):
        self.fixed = fixed

    def today(self) -> date:
        return self.fixed
