"""
Consecutive-day streaks over calendar dates.

Dates are UTC calendar days (see DESIGN.md on the local-day question).
Both functions reduce their input to distinct days first, so any number
of events on one day counts once.
"""

from datetime import date, timedelta
from typing import Iterable

from engagement.core.models import StreakState

ONE_DAY = timedelta(days=1)


def current_streak(dates: Iterable[date], today: date) -> int:
    """
    Length of the run of consecutive days ending at the most recent date.

    The run stays alive while the most recent date is today or yesterday;
    anything older means the streak is broken and the result is 0.
    """
    distinct = sorted(set(dates), reverse=True)
    if not distinct:
        return 0

    most_recent = distinct[0]
    if today - most_recent > ONE_DAY:
        return 0

    streak = 1
    for previous, earlier in zip(distinct, distinct[1:]):
        if previous - earlier != ONE_DAY:
            break
        streak += 1
    return streak


def longest_streak(dates: Iterable[date]) -> int:
    """High-water mark of consecutive days over all history"""
    distinct = sorted(set(dates))
    if not distinct:
        return 0

    best = running = 1
    for earlier, later in zip(distinct, distinct[1:]):
        running = running + 1 if later - earlier == ONE_DAY else 1
        best = max(best, running)
    return best


class StreakCalculator:
    """Thin stateless wrapper so components can share one calculator"""

    def current(self, dates: Iterable[date], today: date) -> int:
        return current_streak(dates, today)

    def longest(self, dates: Iterable[date]) -> int:
        return longest_streak(dates)

    def state(self, dates: Iterable[date], today: date) -> StreakState:
        distinct = set(dates)
        return StreakState(
            current=current_streak(distinct, today),
            longest=longest_streak(distinct),
        )
