"""Unit tests for streak derivation"""

import random
from datetime import date, timedelta

import pytest

from engagement.streaks.calculator import StreakCalculator, current_streak, longest_streak


def days(start: date, count: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(count)]


JAN_1 = date(2026, 1, 1)


class TestCurrentStreak:
    """Current streak: consecutive days ending today or yesterday"""

    def test_empty_is_zero(self) -> None:
        assert current_streak([], JAN_1) == 0

    def test_single_date_today(self) -> None:
        assert current_streak([JAN_1], JAN_1) == 1

    def test_single_date_yesterday_still_alive(self) -> None:
        """User has until the end of today to keep it going"""
        assert current_streak([JAN_1], JAN_1 + timedelta(days=1)) == 1

    def test_two_days_of_inactivity_breaks(self) -> None:
        assert current_streak([JAN_1], JAN_1 + timedelta(days=2)) == 0

    def test_two_consecutive_days(self) -> None:
        assert current_streak([JAN_1, JAN_1 + timedelta(days=1)], JAN_1 + timedelta(days=1)) == 2

    def test_gap_stops_the_walk(self) -> None:
        """{Jan 1, 2, 3, 5} with today Jan 5 -> 1"""
        dates = [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3), date(2026, 1, 5)]
        assert current_streak(dates, date(2026, 1, 5)) == 1

    def test_duplicate_dates_count_once(self) -> None:
        dates = [JAN_1, JAN_1, JAN_1 + timedelta(days=1), JAN_1 + timedelta(days=1)]
        assert current_streak(dates, JAN_1 + timedelta(days=1)) == 2

    def test_week_ending_yesterday(self) -> None:
        dates = days(JAN_1, 7)
        assert current_streak(dates, JAN_1 + timedelta(days=7)) == 7

    @pytest.mark.parametrize("seed", range(20))
    def test_alive_iff_latest_is_today_or_yesterday(self, seed: int) -> None:
        rng = random.Random(seed)
        dates = {JAN_1 + timedelta(days=rng.randrange(60)) for _ in range(rng.randrange(1, 25))}
        today = JAN_1 + timedelta(days=rng.randrange(70))
        latest = max(dates)
        result = current_streak(dates, today)

        if latest in (today, today - timedelta(days=1)):
            assert result >= 1
        elif today - latest > timedelta(days=1):
            assert result == 0


class TestLongestStreak:
    """Longest streak: high-water mark over all history"""

    def test_empty_is_zero(self) -> None:
        assert longest_streak([]) == 0

    def test_single_date(self) -> None:
        assert longest_streak([JAN_1]) == 1

    def test_longest_run_wins(self) -> None:
        dates = [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3), date(2026, 1, 5)]
        assert longest_streak(dates) == 3

    def test_unaffected_by_broken_current_streak(self) -> None:
        dates = days(JAN_1, 5)
        today = JAN_1 + timedelta(days=30)
        assert current_streak(dates, today) == 0
        assert longest_streak(dates) == 5

    def test_order_independent(self) -> None:
        dates = days(JAN_1, 4) + days(JAN_1 + timedelta(days=10), 6)
        shuffled = list(dates)
        random.Random(7).shuffle(shuffled)
        assert longest_streak(shuffled) == longest_streak(dates) == 6

    def test_non_decreasing_as_consecutive_days_added(self) -> None:
        dates: list[date] = [date(2026, 3, 1), date(2026, 3, 9)]
        previous = longest_streak(dates)
        for extra in days(date(2026, 3, 10), 10):
            dates.append(extra)
            current = longest_streak(dates)
            assert current >= previous
            previous = current
        assert previous == 11


class TestStreakCalculator:
    def test_state_combines_both(self) -> None:
        calculator = StreakCalculator()
        dates = [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3), date(2026, 1, 5)]

        state = calculator.state(dates, date(2026, 1, 5))

        assert state.current == 1
        assert state.longest == 3
