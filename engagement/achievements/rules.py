"""Fixed achievement rule table"""

from typing import Callable, NamedTuple

from engagement.catalog.practices import CATALOG_SIZE
from engagement.core.models import ActivityAggregates, BadgeType, PracticeCategory

Predicate = Callable[[ActivityAggregates, int, frozenset], bool]


class AchievementRule(NamedTuple):
    badge_type: BadgeType
    description: str
    predicate: Predicate


def _completions_at_least(n: int) -> Predicate:
    return lambda stats, streak, earned: stats.total_completions >= n


def _category_at_least(category: PracticeCategory, n: int) -> Predicate:
    return lambda stats, streak, earned: stats.category_count(category) >= n


def _streak_at_least(n: int) -> Predicate:
    return lambda stats, streak, earned: streak >= n


# Rules are independent; order only fixes the order of the returned list.
ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        BadgeType.FIRST_STEPS,
        "Complete your first practice",
        _completions_at_least(1),
    ),
    AchievementRule(
        BadgeType.BREATH_MASTER,
        "Complete 3 breathing practices",
        _category_at_least(PracticeCategory.BREATHING, 3),
    ),
    AchievementRule(
        BadgeType.BODY_EXPLORER,
        "Complete 3 body scan practices",
        _category_at_least(PracticeCategory.BODY_SCAN, 3),
    ),
    AchievementRule(
        BadgeType.MOVEMENT_MAVEN,
        "Complete 3 movement practices",
        _category_at_least(PracticeCategory.MOVEMENT, 3),
    ),
    AchievementRule(
        BadgeType.GROUNDED,
        "Complete 3 grounding practices",
        _category_at_least(PracticeCategory.GROUNDING, 3),
    ),
    AchievementRule(
        BadgeType.PRACTICE_MAKES_PROGRESS,
        "Complete 10 practices",
        _completions_at_least(10),
    ),
    AchievementRule(
        BadgeType.SILVER_PRACTICE,
        "Complete 25 practices",
        _completions_at_least(25),
    ),
    AchievementRule(
        BadgeType.GOLDEN_PRACTICE,
        "Complete 50 practices",
        _completions_at_least(50),
    ),
    AchievementRule(
        BadgeType.WEEK_WARRIOR,
        "Practice 7 days in a row",
        _streak_at_least(7),
    ),
    AchievementRule(
        BadgeType.TWO_WEEK_WONDER,
        "Practice 14 days in a row",
        _streak_at_least(14),
    ),
    AchievementRule(
        BadgeType.COMPLETE_COLLECTION,
        "Try every practice in the catalog",
        lambda stats, streak, earned: stats.unique_items_tried == CATALOG_SIZE,
    ),
)
