"""Core data models and configuration"""

from engagement.core.models import (
    ActivityAggregates,
    ActivityEvent,
    ActivityType,
    Badge,
    BadgeType,
    ConversationMessage,
    ConversationSession,
    CrisisScanResult,
    MessageRole,
    PersonalizationSignal,
    PracticeCategory,
    PracticeItem,
    SessionSummary,
    StreakState,
)
from engagement.core.config import settings
from engagement.core.errors import EngagementError, InvalidInputError, ReplyGenerationError

__all__ = [
    "ActivityAggregates",
    "ActivityEvent",
    "ActivityType",
    "Badge",
    "BadgeType",
    "ConversationMessage",
    "ConversationSession",
    "CrisisScanResult",
    "MessageRole",
    "PersonalizationSignal",
    "PracticeCategory",
    "PracticeItem",
    "SessionSummary",
    "StreakState",
    "settings",
    "EngagementError",
    "InvalidInputError",
    "ReplyGenerationError",
]
