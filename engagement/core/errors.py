"""Engagement engine exceptions"""

from typing import Optional


class EngagementError(Exception):
    """Base class for all engine errors"""


class InvalidInputError(EngagementError, ValueError):
    """
    Rejected input: unknown enum value, unknown practice item, empty text.

    Always raised before anything is written.
    """


class ReplyGenerationError(EngagementError):
    """
    The reply collaborator failed, timed out, or returned nothing.

    The user's message is already persisted; no assistant turn was
    recorded, so the caller may let the user resubmit.
    """

    retryable = True

    def __init__(self, message: str, conversation_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.conversation_id = conversation_id
