"""
Streak detection.
Counts consecutive calendar days ending today, used for both activity and login streaks.
"""
from datetime import date
from typing import Iterable

from ganbari_quest.services.date_service import DateService


def count_streak(prior_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive days including today.

    Today is always day one. Walks backward from yesterday while each
    expected date is present and stops at the first gap. Dates after
    today are ignored.

    Args:
        prior_dates: Previously recorded calendar days (order and duplicates don't matter)
        today: Current calendar day

    Returns:
        Streak length (>= 1)
    """
    recorded = set(prior_dates)
    streak = 1
    check_date = DateService.previous_date(today)

    while check_date in recorded:
        streak += 1
        check_date = DateService.previous_date(check_date)

    return streak
