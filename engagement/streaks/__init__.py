"""Streak derivation"""

from engagement.streaks.calculator import StreakCalculator, current_streak, longest_streak

__all__ = ["StreakCalculator", "current_streak", "longest_streak"]
