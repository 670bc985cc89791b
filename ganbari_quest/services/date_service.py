"""
Date calculation service.
Handles the injectable clock, calendar-day arithmetic and the week/period ranges
used by the evaluation jobs and log queries.
"""
from datetime import datetime, timedelta, date, timezone
from typing import Callable

from ganbari_quest.constants import PERIOD_WEEK, PERIOD_MONTH, PERIOD_YEAR

# A clock returns the current naive UTC datetime
Clock = Callable[[], datetime]


class FixedClock:
    """Clock frozen at a given instant; advance() moves it forward"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def utc_now() -> datetime:
        """Current UTC time as a naive datetime (all stored timestamps are naive UTC)"""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def today(clock: Clock) -> date:
        """Calendar day (UTC) for the given clock"""
        return clock().date()

    @staticmethod
    def previous_date(target_date: date) -> date:
        return target_date - timedelta(days=1)

    @staticmethod
    def days_between(earlier: date, later: date) -> int:
        """Whole calendar days from earlier to later (negative if reversed)"""
        return (later - earlier).days

    @staticmethod
    def get_week_range(today: date) -> tuple[date, date]:
        """
        Get the most recently completed Monday-Sunday week.

        If today is Sunday the current week counts as completed, otherwise the
        previous full week is returned.

        Args:
            today: Reference date

        Returns:
            Tuple of (week_start, week_end)
        """
        # weekday(): Monday=0 ... Sunday=6
        days_to_last_sunday = 0 if today.weekday() == 6 else today.weekday() + 1
        week_end = today - timedelta(days=days_to_last_sunday)
        week_start = week_end - timedelta(days=6)
        return week_start, week_end

    @staticmethod
    def get_period_start(period: str, today: date) -> date:
        """
        Get the first day of a reporting period.

        - week: most recent Sunday (today if Sunday)
        - month: first day of the month
        - year: January 1st

        Raises:
            ValueError: If period is unknown
        """
        if period == PERIOD_WEEK:
            return today - timedelta(days=(today.weekday() + 1) % 7)
        if period == PERIOD_MONTH:
            return today.replace(day=1)
        if period == PERIOD_YEAR:
            return today.replace(month=1, day=1)
        raise ValueError(f"Unknown period: {period}")
