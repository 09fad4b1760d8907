"""Core data models for the engagement engine"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize an instant to aware UTC (naive values are taken as UTC)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_day(value: datetime) -> date:
    """UTC calendar date of an instant"""
    return as_utc(value).date()


class ActivityType(str, Enum):
    """Tracked user actions"""

    REFLECTION = "reflection"
    PRACTICE_COMPLETION = "practice_completion"
    CONVERSATION_MESSAGE = "conversation_message"


class PracticeCategory(str, Enum):
    """Somatic practice categories"""

    BREATHING = "breathing"
    GROUNDING = "grounding"
    MOVEMENT = "movement"
    BODY_SCAN = "body_scan"
    SILLY = "silly"


class BadgeType(str, Enum):
    """Achievement badges, each earned at most once per user"""

    FIRST_STEPS = "first_steps"
    BREATH_MASTER = "breath_master"
    BODY_EXPLORER = "body_explorer"
    MOVEMENT_MAVEN = "movement_maven"
    GROUNDED = "grounded"
    PRACTICE_MAKES_PROGRESS = "practice_makes_progress"
    SILVER_PRACTICE = "silver_practice"
    GOLDEN_PRACTICE = "golden_practice"
    WEEK_WARRIOR = "week_warrior"
    TWO_WEEK_WONDER = "two_week_wonder"
    COMPLETE_COLLECTION = "complete_collection"


class MessageRole(str, Enum):
    """Conversation message author"""

    USER = "user"
    ASSISTANT = "assistant"


class ActivityEvent(BaseModel):
    """
    Immutable fact: a user performed one unit of a tracked action.

    Events are the single source of truth; streaks and badges are
    re-derivable from them.
    """

    model_config = {"frozen": True}

    id: UUID = Field(default_factory=uuid4)
    user_id: str
    activity_type: ActivityType
    occurred_at: datetime = Field(default_factory=utcnow)
    category: Optional[PracticeCategory] = None
    item_id: Optional[str] = None

    @field_validator("occurred_at")
    @classmethod
    def _normalize_occurred_at(cls, value: datetime) -> datetime:
        return as_utc(value)


class ActivityAggregates(BaseModel):
    """Per-user ledger totals used by the achievement rules"""

    total_by_type: dict[ActivityType, int] = Field(default_factory=dict)
    total_by_category: dict[PracticeCategory, int] = Field(default_factory=dict)
    unique_items_tried: int = 0

    @property
    def total_completions(self) -> int:
        return self.total_by_type.get(ActivityType.PRACTICE_COMPLETION, 0)

    def category_count(self, category: PracticeCategory) -> int:
        return self.total_by_category.get(category, 0)


class StreakState(BaseModel):
    """Derived streak counts for one activity type (never persisted)"""

    current: int = Field(default=0, ge=0)
    longest: int = Field(default=0, ge=0)


class Badge(BaseModel):
    """A permanently recorded achievement"""

    user_id: str
    badge_type: BadgeType
    earned_at: datetime = Field(default_factory=utcnow)


class ConversationMessage(BaseModel):
    """One turn in a conversation session"""

    role: MessageRole
    content: str
    created_at: datetime = Field(default_factory=utcnow)


class ConversationSession(BaseModel):
    """A check-in conversation; only ever grows by appended messages"""

    id: UUID = Field(default_factory=uuid4)
    user_id: str
    created_at: datetime = Field(default_factory=utcnow)
    messages: list[ConversationMessage] = Field(default_factory=list)


class SessionSummary(BaseModel):
    """Conversation listing entry"""

    id: UUID
    created_at: datetime
    last_message: Optional[str] = None


class PracticeItem(BaseModel):
    """A somatic practice in the fixed catalog"""

    id: str
    title: str
    description: str
    category: PracticeCategory
    duration: str
    instructions: str


class PersonalizationSignal(BaseModel):
    """Three independent nudges; composing them into copy is the caller's job"""

    recent_activity_message: Optional[str] = None
    streak_message: Optional[str] = None
    conversation_context_snippet: Optional[str] = None


class CrisisScanResult(BaseModel):
    """Advisory result of a crisis keyword scan"""

    is_crisis: bool
    matched_keywords: list[str] = Field(default_factory=list)
