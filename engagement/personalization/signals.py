"""Read-only personalization signals composed from ledger and session state"""

from datetime import date, datetime, timedelta
from typing import Optional

from loguru import logger

from engagement.core.config import settings
from engagement.core.models import ActivityType, PersonalizationSignal, as_utc, utcnow
from engagement.ledger.activity_ledger import ActivityLedger
from engagement.storage.sqlite_store import SQLiteEngagementStore
from engagement.streaks.calculator import current_streak

REFLECTION_NUDGE = "You saved a reflection recently. Would you like to sit with it a little longer?"
PRACTICE_TODAY_NUDGE = "You made space for a practice today. Notice how your body feels now."
PRACTICE_YESTERDAY_NUDGE = "You practiced yesterday. A few minutes today could carry that forward."
WELCOME_BACK = "Welcome back."
NEW_CONVERSATION_PROMPT = "Ready for a new conversation? Share what's on your heart."

CONTEXT_WINDOW = timedelta(hours=24)
ELLIPSIS = "..."


class PersonalizationSignalGenerator:
    """
    Produces three independent signals with a fixed priority inside each:

    1. recent activity: reflection in the last 12h, else practice today,
       else practice yesterday
    2. streak: celebration at 3+ days, else time since the last session
    3. context: snippet of the newest user message if under 24h old,
       else a new-conversation prompt

    Nothing here writes.
    """

    def __init__(
        self,
        store: SQLiteEngagementStore,
        ledger: ActivityLedger,
        reflection_window: Optional[timedelta] = None,
        snippet_chars: Optional[int] = None,
        celebration_min: Optional[int] = None,
    ) -> None:
        self.store = store
        self.ledger = ledger
        if reflection_window is None:
            reflection_window = timedelta(hours=settings.REFLECTION_NUDGE_HOURS)
        self.reflection_window = reflection_window
        self.snippet_chars = snippet_chars if snippet_chars is not None else settings.CONTEXT_SNIPPET_CHARS
        self.celebration_min = celebration_min if celebration_min is not None else settings.STREAK_CELEBRATION_MIN

    async def generate(self, user_id: str, now: Optional[datetime] = None) -> PersonalizationSignal:
        now = as_utc(now or utcnow())
        practice_days = await self.ledger.query_dates(user_id, ActivityType.PRACTICE_COMPLETION)

        signal = PersonalizationSignal(
            recent_activity_message=await self._recent_activity(user_id, now, practice_days),
            streak_message=await self._streak(user_id, now, practice_days),
            conversation_context_snippet=await self._context(user_id, now),
        )
        logger.debug(f"Personalization for user={user_id}: {signal.model_dump()}")
        return signal

    async def _recent_activity(
        self,
        user_id: str,
        now: datetime,
        practice_days: set[date],
    ) -> Optional[str]:
        reflected_at = await self.ledger.latest(user_id, ActivityType.REFLECTION)
        if reflected_at and now - reflected_at < self.reflection_window:
            return REFLECTION_NUDGE

        today = now.date()
        if today in practice_days:
            return PRACTICE_TODAY_NUDGE
        if today - timedelta(days=1) in practice_days:
            return PRACTICE_YESTERDAY_NUDGE
        return None

    async def _streak(
        self,
        user_id: str,
        now: datetime,
        practice_days: set[date],
    ) -> Optional[str]:
        streak = current_streak(practice_days, now.date())
        if streak >= self.celebration_min:
            return f"You've practiced {streak} days in a row. That steadiness matters."

        latest = await self.store.get_latest_session(user_id)
        if not latest:
            return None

        days_away = (now - latest.created_at) // timedelta(days=1)
        if days_away >= 2:
            return f"It's been {days_away} days since we last talked. I'm glad you're here."
        if days_away == 1:
            return WELCOME_BACK
        return None

    async def _context(self, user_id: str, now: datetime) -> str:
        message = await self.store.get_latest_user_message(user_id)
        if message and now - message.created_at < CONTEXT_WINDOW:
            snippet = message.content[: self.snippet_chars]
            if len(message.content) > self.snippet_chars:
                snippet += ELLIPSIS
            return snippet
        return NEW_CONVERSATION_PROMPT
