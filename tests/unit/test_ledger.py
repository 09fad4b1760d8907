"""Unit tests for the activity ledger"""

from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

from engagement.core.errors import InvalidInputError
from engagement.core.models import ActivityType, PracticeCategory
from engagement.ledger.activity_ledger import ActivityLedger
from engagement.storage.sqlite_store import SQLiteEngagementStore


@pytest.fixture
async def ledger(tmp_path: Path) -> ActivityLedger:
    store = SQLiteEngagementStore(tmp_path / "test_ledger.db")
    await store.connect()
    yield ActivityLedger(store)
    await store.close()


class TestActivityLedger:

    @pytest.mark.asyncio
    async def test_record_accepts_string_values(self, ledger: ActivityLedger) -> None:
        event_id = await ledger.record("user_001", "practice_completion", category="breathing")

        stats = await ledger.query_aggregates("user_001")
        assert event_id is not None
        assert stats.total_completions == 1
        assert stats.category_count(PracticeCategory.BREATHING) == 1

    @pytest.mark.asyncio
    async def test_unknown_activity_type_rejected(self, ledger: ActivityLedger) -> None:
        with pytest.raises(InvalidInputError):
            await ledger.record("user_001", "meditation")

        stats = await ledger.query_aggregates("user_001")
        assert stats.total_by_type == {}

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, ledger: ActivityLedger) -> None:
        with pytest.raises(InvalidInputError):
            await ledger.record("user_001", ActivityType.PRACTICE_COMPLETION, category="yoga")

    @pytest.mark.asyncio
    async def test_blank_user_rejected(self, ledger: ActivityLedger) -> None:
        with pytest.raises(InvalidInputError):
            await ledger.record("  ", ActivityType.REFLECTION)

    @pytest.mark.asyncio
    async def test_occurred_at_defaults_to_now(self, ledger: ActivityLedger) -> None:
        before = datetime.now(timezone.utc)
        await ledger.record("user_001", ActivityType.REFLECTION)

        latest = await ledger.latest("user_001", ActivityType.REFLECTION)
        assert latest is not None
        assert latest >= before - timedelta(seconds=1)

    @pytest.mark.asyncio
    async def test_query_dates_are_distinct_utc_days(self, ledger: ActivityLedger) -> None:
        base = datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)
        for hours in (0, 2, 4, 24, 49):
            await ledger.record("user_001", ActivityType.PRACTICE_COMPLETION, occurred_at=base + timedelta(hours=hours))

        dates = await ledger.query_dates("user_001", ActivityType.PRACTICE_COMPLETION)

        assert dates == {date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)}

    @pytest.mark.asyncio
    async def test_day_is_utc_not_local(self, ledger: ActivityLedger) -> None:
        """23:30 at UTC-5 on Jan 1 is Jan 2 in UTC"""
        eastern = timezone(timedelta(hours=-5))
        await ledger.record(
            "user_001",
            ActivityType.REFLECTION,
            occurred_at=datetime(2026, 1, 1, 23, 30, tzinfo=eastern),
        )

        dates = await ledger.query_dates("user_001", ActivityType.REFLECTION)
        assert dates == {date(2026, 1, 2)}

    @pytest.mark.asyncio
    async def test_dates_scoped_by_type_and_user(self, ledger: ActivityLedger) -> None:
        when = datetime(2026, 1, 1, 12, tzinfo=timezone.utc)
        await ledger.record("user_001", ActivityType.REFLECTION, occurred_at=when)
        await ledger.record("user_002", ActivityType.PRACTICE_COMPLETION, occurred_at=when)

        assert await ledger.query_dates("user_001", ActivityType.PRACTICE_COMPLETION) == set()
        assert await ledger.query_dates("user_002", ActivityType.PRACTICE_COMPLETION) == {date(2026, 1, 1)}
