"""Activity pipeline: record, re-derive streak, award badges"""

from datetime import datetime
from typing import NamedTuple, Optional, Union
from uuid import UUID

from loguru import logger

from engagement.achievements.evaluator import AchievementEvaluator
from engagement.catalog.practices import get_practice
from engagement.core.errors import InvalidInputError
from engagement.core.models import (
    ActivityType,
    BadgeType,
    PracticeCategory,
    StreakState,
    as_utc,
    utc_day,
    utcnow,
)
from engagement.ledger.activity_ledger import ActivityLedger
from engagement.storage.sqlite_store import SQLiteEngagementStore
from engagement.streaks.calculator import StreakCalculator


class ActivityOutcome(NamedTuple):
    event_id: UUID
    activity_type: ActivityType
    streak: StreakState
    new_badges: list[BadgeType]


class ActivityPipeline:
    """
    Synchronous per-request flow for an activity-producing action.

    Stage 0: validate enums and the practice item against the catalog
    Stage 1: append to the ledger
    Stage 2: re-derive the streak for the recorded activity type
    Stage 3: evaluate achievements

    Nothing is written if stage 0 fails.
    """

    def __init__(
        self,
        store: SQLiteEngagementStore,
        ledger: Optional[ActivityLedger] = None,
        calculator: Optional[StreakCalculator] = None,
        evaluator: Optional[AchievementEvaluator] = None,
    ) -> None:
        self.store = store
        self.ledger = ledger or ActivityLedger(store)
        self.calculator = calculator or StreakCalculator()
        self.evaluator = evaluator or AchievementEvaluator(store, self.ledger, self.calculator)
        self.activities_processed = 0
        logger.info("ActivityPipeline initialized")

    async def record_activity(
        self,
        user_id: str,
        activity_type: Union[ActivityType, str],
        category: Union[PracticeCategory, str, None] = None,
        item_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ActivityOutcome:
        """
        Record one activity and return the derived state.

        Raises:
            InvalidInputError: unknown type, category or practice item, or a
                category that contradicts the practice item
        """
        now = as_utc(now or utcnow())
        activity_type = self._parse(ActivityType, activity_type, "activity type")
        category = self._parse(PracticeCategory, category, "category") if category else None

        if item_id is not None:
            practice = get_practice(item_id)
            if practice is None:
                raise InvalidInputError(f"Unknown practice item: {item_id}")
            if category is None:
                category = practice.category
            elif category != practice.category:
                raise InvalidInputError(
                    f"Practice {item_id} is {practice.category.value}, not {category.value}"
                )

        event_id = await self.ledger.record(
            user_id,
            activity_type,
            occurred_at=now,
            category=category,
            item_id=item_id,
        )
        self.activities_processed += 1
        streak = await self.streak_for(user_id, activity_type, now)
        new_badges = await self.evaluator.evaluate(user_id, now)

        logger.info(
            "Activity processed for user={user}: streak={current}/{longest} new_badges={badges}",
            user=user_id,
            current=streak.current,
            longest=streak.longest,
            badges=[b.value for b in new_badges],
        )
        return ActivityOutcome(event_id, activity_type, streak, new_badges)

    async def streak_for(
        self,
        user_id: str,
        activity_type: ActivityType,
        now: Optional[datetime] = None,
    ) -> StreakState:
        days = await self.ledger.query_dates(user_id, activity_type)
        return self.calculator.state(days, utc_day(now or utcnow()))

    async def all_streaks(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> dict[ActivityType, StreakState]:
        """Streak state for every activity type"""
        return {
            activity_type: await self.streak_for(user_id, activity_type, now)
            for activity_type in ActivityType
        }

    @staticmethod
    def _parse(enum_cls, value, label: str):
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(value)
        except ValueError as e:
            raise InvalidInputError(f"Unknown {label}: {value}") from e

    def get_stats(self) -> dict:
        """Get pipeline statistics"""
        return {
            "activities_processed": self.activities_processed,
            "ledger": self.ledger.get_stats(),
            "evaluator": self.evaluator.get_stats(),
        }
