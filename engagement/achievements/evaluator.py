"""Badge awarding against the fixed rule table"""

from datetime import datetime
from typing import Optional

from loguru import logger

from engagement.achievements.rules import ACHIEVEMENT_RULES, AchievementRule
from engagement.core.models import ActivityType, Badge, BadgeType, utc_day, utcnow
from engagement.ledger.activity_ledger import ActivityLedger
from engagement.storage.sqlite_store import SQLiteEngagementStore
from engagement.streaks.calculator import StreakCalculator


class AchievementEvaluator:
    """
    Awards every qualifying, not-yet-earned badge in a single pass.

    Each badge is awarded at most once per user. The earned-set check
    avoids pointless writes; the (user_id, badge_type) key in storage is
    what actually guarantees it when two evaluations race.

    Because badges depend only on the ledger and the earned set, running
    evaluate() again over a rebuilt ledger reproduces the same badges.
    """

    def __init__(
        self,
        store: SQLiteEngagementStore,
        ledger: ActivityLedger,
        calculator: Optional[StreakCalculator] = None,
        rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self.calculator = calculator or StreakCalculator()
        self.rules = rules
        self.badges_awarded = 0
        logger.info(f"AchievementEvaluator initialized ({len(rules)} rules)")

    async def evaluate(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> list[BadgeType]:
        """
        Award newly earned badges.

        Args:
            user_id: User to evaluate
            now: Reference instant for the streak, defaults to now

        Returns:
            Badges awarded by this call, in rule-table order. Empty when
            nothing new qualified.
        """
        now = now or utcnow()

        stats = await self.ledger.query_aggregates(user_id)
        practice_days = await self.ledger.query_dates(user_id, ActivityType.PRACTICE_COMPLETION)
        streak = self.calculator.current(practice_days, utc_day(now))
        earned = frozenset(b.badge_type for b in await self.store.get_badges(user_id))

        awarded: list[BadgeType] = []
        for rule in self.rules:
            if rule.badge_type in earned:
                continue
            if not rule.predicate(stats, streak, earned):
                continue

            badge = Badge(user_id=user_id, badge_type=rule.badge_type, earned_at=now)
            if await self.store.insert_badge(badge):
                awarded.append(rule.badge_type)
                self.badges_awarded += 1
                logger.info(
                    "Awarded badge {badge} to user={user}",
                    badge=rule.badge_type.value,
                    user=user_id,
                )
            else:
                logger.warning(
                    "Badge {badge} for user={user} already recorded by a concurrent evaluation",
                    badge=rule.badge_type.value,
                    user=user_id,
                )

        return awarded

    def get_stats(self) -> dict:
        return {"rules": len(self.rules), "badges_awarded": self.badges_awarded}
