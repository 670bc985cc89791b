"""
Tests for DateService.

Tests cover:
1. Clock helpers
2. Completed week range for the weekly evaluation
3. Period start for log queries
"""
import pytest
from datetime import date, datetime

from ganbari_quest.services.date_service import DateService, FixedClock


class TestClock:
    """Tests for the clock helpers"""

    def test_utc_now_is_naive(self):
        assert DateService.utc_now().tzinfo is None

    def test_fixed_clock_advance(self):
        clock = FixedClock(datetime(2026, 1, 21, 23, 59, 58))
        clock.advance(seconds=3)
        assert clock() == datetime(2026, 1, 22, 0, 0, 1)
        assert DateService.today(clock) == date(2026, 1, 22)

    def test_days_between(self):
        assert DateService.days_between(date(2026, 1, 18), date(2026, 1, 21)) == 3
        assert DateService.days_between(date(2026, 1, 21), date(2026, 1, 21)) == 0
        assert DateService.days_between(date(2026, 1, 22), date(2026, 1, 21)) == -1


class TestWeekRange:
    """Tests for get_week_range"""

    def test_midweek_returns_previous_week(self):
        """Wednesday 21st -> Monday 12th .. Sunday 18th"""
        assert DateService.get_week_range(date(2026, 1, 21)) == (date(2026, 1, 12), date(2026, 1, 18))

    def test_monday_returns_previous_week(self):
        assert DateService.get_week_range(date(2026, 1, 19)) == (date(2026, 1, 12), date(2026, 1, 18))

    def test_sunday_returns_current_week(self):
        assert DateService.get_week_range(date(2026, 1, 25)) == (date(2026, 1, 19), date(2026, 1, 25))

    def test_range_spans_seven_days(self):
        start, end = DateService.get_week_range(date(2026, 3, 4))
        assert start.weekday() == 0
        assert end.weekday() == 6
        assert (end - start).days == 6


class TestPeriodStart:
    """Tests for get_period_start"""

    def test_week_starts_on_sunday(self):
        assert DateService.get_period_start("week", date(2026, 1, 21)) == date(2026, 1, 18)

    def test_week_on_sunday_is_today(self):
        assert DateService.get_period_start("week", date(2026, 1, 18)) == date(2026, 1, 18)

    def test_month(self):
        assert DateService.get_period_start("month", date(2026, 1, 21)) == date(2026, 1, 1)

    def test_year(self):
        assert DateService.get_period_start("year", date(2026, 7, 4)) == date(2026, 1, 1)

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            DateService.get_period_start("decade", date(2026, 1, 21))
