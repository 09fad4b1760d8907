"""Unit tests for the achievement evaluator"""

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from engagement.achievements.evaluator import AchievementEvaluator
from engagement.achievements.rules import ACHIEVEMENT_RULES
from engagement.catalog.practices import PRACTICE_CATALOG
from engagement.core.models import ActivityType, BadgeType, PracticeCategory
from engagement.ledger.activity_ledger import ActivityLedger
from engagement.storage.sqlite_store import SQLiteEngagementStore

JAN_1 = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
async def store(tmp_path: Path) -> SQLiteEngagementStore:
    store = SQLiteEngagementStore(tmp_path / "test_achievements.db")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def ledger(store: SQLiteEngagementStore) -> ActivityLedger:
    return ActivityLedger(store)


@pytest.fixture
def evaluator(store: SQLiteEngagementStore, ledger: ActivityLedger) -> AchievementEvaluator:
    return AchievementEvaluator(store, ledger)


async def complete(ledger: ActivityLedger, when: datetime, category=None, item_id=None, user="user_001"):
    await ledger.record(
        user,
        ActivityType.PRACTICE_COMPLETION,
        occurred_at=when,
        category=category,
        item_id=item_id,
    )


class TestRuleTable:

    def test_every_badge_has_exactly_one_rule(self) -> None:
        badge_types = [rule.badge_type for rule in ACHIEVEMENT_RULES]
        assert sorted(badge_types, key=lambda b: b.value) == sorted(BadgeType, key=lambda b: b.value)


class TestAchievementEvaluator:

    @pytest.mark.asyncio
    async def test_no_activity_no_badges(self, evaluator: AchievementEvaluator) -> None:
        assert await evaluator.evaluate("user_001", JAN_1) == []

    @pytest.mark.asyncio
    async def test_first_completion_awards_first_steps(
        self, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        await complete(ledger, JAN_1, PracticeCategory.SILLY)

        assert await evaluator.evaluate("user_001", JAN_1) == [BadgeType.FIRST_STEPS]

    @pytest.mark.asyncio
    async def test_second_evaluation_is_empty(
        self, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        """Idempotence: nothing new between calls -> nothing awarded"""
        await complete(ledger, JAN_1, PracticeCategory.BREATHING)

        first = await evaluator.evaluate("user_001", JAN_1)
        second = await evaluator.evaluate("user_001", JAN_1)

        assert first == [BadgeType.FIRST_STEPS]
        assert second == []

    @pytest.mark.asyncio
    async def test_breath_master_awarded_once_over_a_week(
        self,
        store: SQLiteEngagementStore,
        ledger: ActivityLedger,
        evaluator: AchievementEvaluator,
    ) -> None:
        """Jan 1..7, three breathing completions a day, evaluate after each of 21 events"""
        awarded: list[BadgeType] = []
        for day in range(7):
            for slot in range(3):
                when = JAN_1 + timedelta(days=day, hours=slot)
                await complete(ledger, when, PracticeCategory.BREATHING)
                awarded.extend(await evaluator.evaluate("user_001", when))

        assert awarded.count(BadgeType.BREATH_MASTER) == 1
        assert awarded.count(BadgeType.FIRST_STEPS) == 1
        assert awarded.count(BadgeType.PRACTICE_MAKES_PROGRESS) == 1
        assert awarded.count(BadgeType.WEEK_WARRIOR) == 1
        assert BadgeType.SILVER_PRACTICE not in awarded

        earned = [b.badge_type for b in await store.get_badges("user_001")]
        assert len(earned) == len(set(earned))

    @pytest.mark.asyncio
    async def test_category_badges(
        self, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        for category in (PracticeCategory.BODY_SCAN, PracticeCategory.MOVEMENT, PracticeCategory.GROUNDING):
            for i in range(3):
                await complete(ledger, JAN_1 + timedelta(minutes=i), category)

        awarded = await evaluator.evaluate("user_001", JAN_1)

        assert awarded == [
            BadgeType.FIRST_STEPS,
            BadgeType.BODY_EXPLORER,
            BadgeType.MOVEMENT_MAVEN,
            BadgeType.GROUNDED,
        ]

    @pytest.mark.asyncio
    async def test_total_thresholds(
        self, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        for i in range(50):
            await complete(ledger, JAN_1 + timedelta(minutes=i))

        awarded = await evaluator.evaluate("user_001", JAN_1)

        for badge in (
            BadgeType.FIRST_STEPS,
            BadgeType.PRACTICE_MAKES_PROGRESS,
            BadgeType.SILVER_PRACTICE,
            BadgeType.GOLDEN_PRACTICE,
        ):
            assert badge in awarded

    @pytest.mark.asyncio
    async def test_streak_badges_use_current_streak(
        self, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        for day in range(14):
            await complete(ledger, JAN_1 + timedelta(days=day))

        # Evaluated three days after the run ended the streak is broken
        stale = JAN_1 + timedelta(days=16)
        assert BadgeType.WEEK_WARRIOR not in await evaluator.evaluate("user_001", stale)

        fresh = JAN_1 + timedelta(days=13)
        awarded = await evaluator.evaluate("user_001", fresh)
        assert BadgeType.WEEK_WARRIOR in awarded
        assert BadgeType.TWO_WEEK_WONDER in awarded

    @pytest.mark.asyncio
    async def test_complete_collection(
        self, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        for item in PRACTICE_CATALOG[:-1]:
            await complete(ledger, JAN_1, item.category, item.id)
        assert BadgeType.COMPLETE_COLLECTION not in await evaluator.evaluate("user_001", JAN_1)

        last = PRACTICE_CATALOG[-1]
        await complete(ledger, JAN_1, last.category, last.id)
        assert BadgeType.COMPLETE_COLLECTION in await evaluator.evaluate("user_001", JAN_1)

    @pytest.mark.asyncio
    async def test_badges_are_per_user(
        self, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        await complete(ledger, JAN_1, user="user_001")
        await complete(ledger, JAN_1, user="user_002")

        assert await evaluator.evaluate("user_001", JAN_1) == [BadgeType.FIRST_STEPS]
        assert await evaluator.evaluate("user_002", JAN_1) == [BadgeType.FIRST_STEPS]

    @pytest.mark.asyncio
    async def test_concurrent_evaluations_award_once(
        self,
        store: SQLiteEngagementStore,
        ledger: ActivityLedger,
        evaluator: AchievementEvaluator,
    ) -> None:
        await complete(ledger, JAN_1)
        other = AchievementEvaluator(store, ledger)

        results = await asyncio.gather(
            evaluator.evaluate("user_001", JAN_1),
            other.evaluate("user_001", JAN_1),
        )

        flattened = [badge for result in results for badge in result]
        assert flattened.count(BadgeType.FIRST_STEPS) == 1
        assert len(await store.get_badges("user_001")) == 1

    @pytest.mark.asyncio
    async def test_rebuild_from_ledger_reproduces_badges(
        self, tmp_path: Path, ledger: ActivityLedger, evaluator: AchievementEvaluator
    ) -> None:
        for day in range(3):
            for _ in range(3):
                await complete(ledger, JAN_1 + timedelta(days=day), PracticeCategory.GROUNDING)
        original = await evaluator.evaluate("user_001", JAN_1 + timedelta(days=2))

        replica = SQLiteEngagementStore(tmp_path / "replica.db")
        await replica.connect()
        replica_ledger = ActivityLedger(replica)
        for day in range(3):
            for _ in range(3):
                await complete(replica_ledger, JAN_1 + timedelta(days=day), PracticeCategory.GROUNDING)
        rebuilt = await AchievementEvaluator(replica, replica_ledger).evaluate(
            "user_001", JAN_1 + timedelta(days=2)
        )
        await replica.close()

        assert rebuilt == original
