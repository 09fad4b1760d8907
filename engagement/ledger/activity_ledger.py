"""Append-only ledger of user activity facts"""

from datetime import date, datetime
from typing import Optional, Union
from uuid import UUID

from loguru import logger
from pydantic import ValidationError

from engagement.core.errors import InvalidInputError
from engagement.core.models import (
    ActivityAggregates,
    ActivityEvent,
    ActivityType,
    PracticeCategory,
    utc_day,
    utcnow,
)
from engagement.storage.sqlite_store import SQLiteEngagementStore


class ActivityLedger:
    """
    Single source of truth for engagement.

    Every write is an append; the same logical action recorded twice
    yields two events. Enum values are validated here, at the boundary.
    """

    def __init__(self, store: SQLiteEngagementStore) -> None:
        self.store = store
        self.events_recorded = 0
        logger.info("ActivityLedger initialized")

    async def record(
        self,
        user_id: str,
        activity_type: Union[ActivityType, str],
        occurred_at: Optional[datetime] = None,
        category: Union[PracticeCategory, str, None] = None,
        item_id: Optional[str] = None,
    ) -> UUID:
        """
        Append an activity event.

        Args:
            user_id: Owner of the event
            activity_type: ActivityType or its string value
            occurred_at: Instant of the action, defaults to now
            category: Optional practice category
            item_id: Optional practice catalog slug

        Returns:
            The new event id

        Raises:
            InvalidInputError: unknown activity type or category, blank user
        """
        if not user_id or not user_id.strip():
            raise InvalidInputError("user_id must not be empty")

        try:
            event = ActivityEvent(
                user_id=user_id,
                activity_type=activity_type,
                occurred_at=occurred_at or utcnow(),
                category=category,
                item_id=item_id,
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid activity event: {e.errors()[0]['msg']}") from e

        await self.store.insert_event(event)
        self.events_recorded += 1

        logger.info(
            "Recorded {activity} for user={user} category={category}",
            activity=event.activity_type.value,
            user=user_id,
            category=event.category.value if event.category else "none",
        )
        return event.id

    async def query_dates(
        self,
        user_id: str,
        activity_type: ActivityType,
    ) -> set[date]:
        """Distinct UTC calendar dates on which the activity occurred"""
        times = await self.store.get_event_times(user_id, activity_type)
        return {utc_day(t) for t in times}

    async def query_aggregates(self, user_id: str) -> ActivityAggregates:
        """Totals by type and category, plus distinct practice items tried"""
        return await self.store.get_aggregates(user_id)

    async def latest(
        self,
        user_id: str,
        activity_type: ActivityType,
    ) -> Optional[datetime]:
        """Instant of the most recent event of a type, if any"""
        return await self.store.get_latest_event_time(user_id, activity_type)

    def get_stats(self) -> dict:
        return {"events_recorded": self.events_recorded}
