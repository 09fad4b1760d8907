"""
Conversation session continuity.

A user is either Active (their latest session was created less than the
continuity window ago) or Expired. Eligibility is fixed at creation time:
sending messages does not extend a session's window.
"""

import asyncio
import re
from datetime import datetime, timedelta
from typing import NamedTuple, Optional
from uuid import UUID

from loguru import logger

from engagement.core.config import settings
from engagement.core.errors import InvalidInputError, ReplyGenerationError
from engagement.core.models import (
    ActivityType,
    ConversationMessage,
    ConversationSession,
    MessageRole,
    as_utc,
    utcnow,
)
from engagement.ledger.activity_ledger import ActivityLedger
from engagement.sessions.reply_generator import ReplyGenerator
from engagement.storage.sqlite_store import SQLiteEngagementStore

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid_shaped(value: Optional[str]) -> bool:
    return bool(value) and UUID_PATTERN.match(value) is not None


def _require_user(user_id: str) -> None:
    if not user_id or not user_id.strip():
        raise InvalidInputError("user_id must not be empty")


class StartResult(NamedTuple):
    session: ConversationSession
    is_new: bool


class TurnResult(NamedTuple):
    session: ConversationSession
    reply: str
    is_new: bool


class SessionContinuityResolver:
    """
    Decides whether a turn resumes the latest session or starts a new one.

    The read-then-create in start_or_resume is not locked; two concurrent
    calls can each create a session. That only splits history.
    """

    def __init__(
        self,
        store: SQLiteEngagementStore,
        generator: ReplyGenerator,
        ledger: Optional[ActivityLedger] = None,
        window: Optional[timedelta] = None,
        history_limit: Optional[int] = None,
        reply_timeout: Optional[float] = None,
        opening_message: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> None:
        self.store = store
        self.generator = generator
        self.ledger = ledger
        if window is None:
            window = timedelta(hours=settings.SESSION_WINDOW_HOURS)
        self.window = window
        self.history_limit = history_limit if history_limit is not None else settings.HISTORY_LIMIT
        self.reply_timeout = reply_timeout if reply_timeout is not None else settings.REPLY_TIMEOUT_SECONDS
        self.opening_message = opening_message or settings.OPENING_MESSAGE
        self.system_prompt = system_prompt or settings.SYSTEM_PROMPT
        self.fallbacks = 0
        logger.info(f"SessionContinuityResolver initialized (window={self.window})")

    def is_active(self, session: ConversationSession, now: datetime) -> bool:
        return as_utc(now) - session.created_at < self.window

    async def start_or_resume(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> StartResult:
        """Resume the latest session if still inside its window, else open a new one"""
        _require_user(user_id)
        now = as_utc(now or utcnow())

        latest = await self.store.get_latest_session(user_id)
        if latest and self.is_active(latest, now):
            logger.debug(f"Resuming conversation {latest.id} for user {user_id}")
            return StartResult(latest, False)

        session = ConversationSession(
            user_id=user_id,
            created_at=now,
            messages=[
                ConversationMessage(
                    role=MessageRole.ASSISTANT,
                    content=self.opening_message,
                    created_at=now,
                )
            ],
        )
        await self.store.create_session(session)
        return StartResult(session, True)

    async def append_turn(
        self,
        conversation_id: Optional[str],
        user_id: str,
        user_message: str,
        now: Optional[datetime] = None,
    ) -> TurnResult:
        """
        Add a user message and the generated reply to a session.

        A malformed, unknown or foreign conversation_id is not an error:
        the turn falls back to start_or_resume.

        Raises:
            InvalidInputError: blank user_id or empty message (nothing is written)
            ReplyGenerationError: reply failed; the user message stays
                persisted and no assistant message is written
        """
        _require_user(user_id)
        if not user_message or not user_message.strip():
            raise InvalidInputError("message must not be empty")
        now = as_utc(now or utcnow())

        session = None
        is_new = False
        if is_uuid_shaped(conversation_id):
            session = await self.store.get_session(UUID(conversation_id), user_id)
        if session is None:
            if conversation_id:
                self.fallbacks += 1
                logger.warning(
                    "Conversation {cid} not usable for user={user}, falling back",
                    cid=conversation_id,
                    user=user_id,
                )
            session, is_new = await self.start_or_resume(user_id, now)

        history = [
            {"role": m.role.value, "content": m.content}
            for m in await self.store.get_recent_messages(session.id, self.history_limit)
        ]
        history.append({"role": MessageRole.USER.value, "content": user_message})

        user_turn = ConversationMessage(role=MessageRole.USER, content=user_message, created_at=now)
        await self.store.append_message(session.id, user_turn)
        session.messages.append(user_turn)
        if self.ledger:
            await self.ledger.record(user_id, ActivityType.CONVERSATION_MESSAGE, occurred_at=now)

        reply = await self._generate(session, history)

        assistant_turn = ConversationMessage(role=MessageRole.ASSISTANT, content=reply, created_at=now)
        await self.store.append_message(session.id, assistant_turn)
        session.messages.append(assistant_turn)

        logger.info(
            "Turn complete for conversation={cid} user={user} reply_length={length}",
            cid=session.id,
            user=user_id,
            length=len(reply),
        )
        return TurnResult(session, reply, is_new)

    async def _generate(self, session: ConversationSession, history: list[dict[str, str]]) -> str:
        try:
            reply = await asyncio.wait_for(
                self.generator.generate(self.system_prompt, history),
                timeout=self.reply_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Reply generation timed out after {self.reply_timeout}s for {session.id}")
            raise ReplyGenerationError("Reply generation timed out", str(session.id)) from e
        except Exception as e:
            logger.error(f"Reply generation failed for {session.id}: {e}")
            raise ReplyGenerationError("Reply generation failed", str(session.id)) from e

        if not reply or not reply.strip():
            logger.error(f"Reply generation returned empty output for {session.id}")
            raise ReplyGenerationError("Reply generation returned empty output", str(session.id))
        return reply

    def get_stats(self) -> dict:
        return {
            "fallbacks": self.fallbacks,
            "generator": self.generator.get_stats(),
        }
