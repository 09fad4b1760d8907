"""Conversation sessions"""

from engagement.sessions.continuity import SessionContinuityResolver, StartResult, TurnResult
from engagement.sessions.reply_generator import AnthropicReplyGenerator, ReplyGenerator

__all__ = [
    "SessionContinuityResolver",
    "StartResult",
    "TurnResult",
    "AnthropicReplyGenerator",
    "ReplyGenerator",
]
