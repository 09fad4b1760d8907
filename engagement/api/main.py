"""FastAPI application for the engagement engine"""

from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union
from uuid import UUID

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from engagement import __version__
from engagement.catalog.practices import seed_practice_catalog
from engagement.core.config import settings
from engagement.core.errors import InvalidInputError, ReplyGenerationError
from engagement.core.logging_setup import configure_logging
from engagement.core.models import ActivityType, BadgeType, MessageRole, PracticeCategory
from engagement.personalization.signals import PersonalizationSignalGenerator
from engagement.pipeline.activity_pipeline import ActivityPipeline
from engagement.safety.crisis_scanner import CrisisKeywordScanner
from engagement.sessions.continuity import SessionContinuityResolver, is_uuid_shaped
from engagement.sessions.reply_generator import AnthropicReplyGenerator, ReplyGenerator
from engagement.storage.sqlite_store import SQLiteEngagementStore


# Request/Response models
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecordActivityRequest(CamelModel):
    """Request to record an activity"""
    user_id: str
    activity_type: ActivityType
    category: Optional[PracticeCategory] = None
    item_id: Optional[str] = None


class StreakResponse(CamelModel):
    current: int
    longest: int


class RecordActivityResponse(CamelModel):
    """Derived state after recording an activity"""
    streak: StreakResponse
    new_badges: List[BadgeType]


class StreaksResponse(CamelModel):
    reflection: StreakResponse
    practice_completion: StreakResponse
    conversation_message: StreakResponse


class BadgeResponse(CamelModel):
    badge_type: BadgeType
    earned_at: datetime


class PracticeResponse(CamelModel):
    id: str
    title: str
    description: str
    category: PracticeCategory
    duration: str
    instructions: str


class MessageResponse(CamelModel):
    role: MessageRole
    content: str
    created_at: datetime


class StartSessionRequest(CamelModel):
    user_id: str


class StartSessionResponse(CamelModel):
    conversation_id: str
    is_new: bool
    messages: List[MessageResponse]


class TurnRequest(CamelModel):
    """A user message in a check-in conversation"""
    user_id: str
    conversation_id: Optional[str] = None
    message: str


class TurnResponse(CamelModel):
    conversation_id: str
    is_new: bool
    assistant_reply: str


class ConversationSummaryResponse(CamelModel):
    id: str
    created_at: datetime
    last_message: Optional[str] = None


class ConversationResponse(CamelModel):
    id: str
    created_at: datetime
    messages: List[MessageResponse]


class PersonalizationResponse(CamelModel):
    recent_activity_message: Optional[str] = None
    streak_message: Optional[str] = None
    conversation_context_snippet: Optional[str] = None


class ScanRequest(CamelModel):
    text: str


class ScanResponse(CamelModel):
    is_crisis: bool
    matched_keywords: List[str]


class StatsResponse(CamelModel):
    """Counters since startup plus table row counts"""
    activities_processed: int
    events_recorded: int
    badges_awarded: int
    session_fallbacks: int
    replies_requested: int
    storage: Dict[str, int]


def create_app(
    db_path: Union[Path, str, None] = None,
    reply_generator: Optional[ReplyGenerator] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        db_path: SQLite path, defaults to settings.DB_PATH
        reply_generator: Reply collaborator, defaults to AnthropicReplyGenerator
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan (startup/shutdown)"""
        configure_logging(settings.LOG_LEVEL)

        # Startup
        store = SQLiteEngagementStore(db_path or settings.DB_PATH)
        await store.connect()
        await seed_practice_catalog(store)

        pipeline = ActivityPipeline(store)
        app.state.store = store
        app.state.pipeline = pipeline
        app.state.resolver = SessionContinuityResolver(
            store,
            reply_generator or AnthropicReplyGenerator(),
            ledger=pipeline.ledger,
        )
        app.state.personalization = PersonalizationSignalGenerator(store, pipeline.ledger)
        app.state.scanner = CrisisKeywordScanner()

        yield

        # Shutdown
        await store.close()

    app = FastAPI(
        title="Temporal Engagement & Achievement Engine",
        description="Streaks, badges, conversation continuity and personalization",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        logger.warning(f"Rejected request to {request.url.path}: {exc}")
        return JSONResponse(status_code=422, content={"error": str(exc)})

    @app.exception_handler(ReplyGenerationError)
    async def reply_failure_handler(request: Request, exc: ReplyGenerationError):
        return JSONResponse(
            status_code=502,
            content={
                "error": str(exc),
                "conversationId": exc.conversation_id,
                "retryable": exc.retryable,
            },
        )

    # Endpoints
    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": "Temporal Engagement & Achievement Engine",
            "version": __version__,
            "status": "running",
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        if not getattr(request.app.state, "store", None):
            raise HTTPException(status_code=503, detail="System not ready")
        return {"status": "healthy"}

    @app.get("/stats", response_model=StatsResponse)
    async def get_stats(request: Request):
        """Component counters and storage row counts"""
        state = request.app.state
        pipeline_stats = state.pipeline.get_stats()
        resolver_stats = state.resolver.get_stats()
        return StatsResponse(
            activities_processed=pipeline_stats["activities_processed"],
            events_recorded=pipeline_stats["ledger"]["events_recorded"],
            badges_awarded=pipeline_stats["evaluator"]["badges_awarded"],
            session_fallbacks=resolver_stats["fallbacks"],
            replies_requested=resolver_stats["generator"]["calls"],
            storage=await state.store.get_stats(),
        )

    @app.post("/engagement/activity", response_model=RecordActivityResponse)
    async def record_activity(body: RecordActivityRequest, request: Request):
        """
        Record a reflection, practice completion or conversation message.

        Returns the streak for that activity type and any badges the
        activity unlocked.
        """
        outcome = await request.app.state.pipeline.record_activity(
            body.user_id,
            body.activity_type,
            category=body.category,
            item_id=body.item_id,
        )
        return RecordActivityResponse(
            streak=StreakResponse(current=outcome.streak.current, longest=outcome.streak.longest),
            new_badges=outcome.new_badges,
        )

    @app.get("/engagement/streaks", response_model=StreaksResponse)
    async def get_streaks(request: Request, user_id: str = Query(..., alias="userId")):
        """Current and longest streak for every activity type"""
        streaks = await request.app.state.pipeline.all_streaks(user_id)
        return StreaksResponse(
            **{
                activity_type.value: StreakResponse(current=state.current, longest=state.longest)
                for activity_type, state in streaks.items()
            }
        )

    @app.get("/engagement/badges", response_model=List[BadgeResponse])
    async def get_badges(request: Request, user_id: str = Query(..., alias="userId")):
        badges = await request.app.state.store.get_badges(user_id)
        return [BadgeResponse(badge_type=b.badge_type, earned_at=b.earned_at) for b in badges]

    @app.get("/practices", response_model=List[PracticeResponse])
    async def get_practices(request: Request, category: Optional[PracticeCategory] = None):
        practices = await request.app.state.store.get_practices(category)
        return [PracticeResponse(**p.model_dump()) for p in practices]

    @app.post("/session/start", response_model=StartSessionResponse)
    async def start_session(body: StartSessionRequest, request: Request):
        """Resume the active conversation or open a new one"""
        session, is_new = await request.app.state.resolver.start_or_resume(body.user_id)
        return StartSessionResponse(
            conversation_id=str(session.id),
            is_new=is_new,
            messages=[MessageResponse(**m.model_dump()) for m in session.messages],
        )

    @app.post("/session/turn", response_model=TurnResponse)
    async def session_turn(body: TurnRequest, request: Request):
        """
        Send a message and get the companion's reply.

        Stale or unknown conversation ids silently continue in a resumed or
        new session. A failed reply returns 502; the message is kept.
        """
        state = request.app.state
        result = await state.resolver.append_turn(body.conversation_id, body.user_id, body.message)
        await state.pipeline.evaluator.evaluate(body.user_id)
        return TurnResponse(
            conversation_id=str(result.session.id),
            is_new=result.is_new,
            assistant_reply=result.reply,
        )

    @app.get("/session/personalization", response_model=PersonalizationResponse)
    async def get_personalization(request: Request, user_id: str = Query(..., alias="userId")):
        signal = await request.app.state.personalization.generate(user_id)
        return PersonalizationResponse(**signal.model_dump())

    @app.get("/session/conversations", response_model=List[ConversationSummaryResponse])
    async def list_conversations(request: Request, user_id: str = Query(..., alias="userId")):
        """Conversations newest first with their last message"""
        summaries = await request.app.state.store.list_sessions(user_id)
        return [
            ConversationSummaryResponse(id=str(s.id), created_at=s.created_at, last_message=s.last_message)
            for s in summaries
        ]

    @app.get("/session/{conversation_id}", response_model=ConversationResponse)
    async def get_conversation(
        conversation_id: str,
        request: Request,
        user_id: str = Query(..., alias="userId"),
    ):
        session = None
        if is_uuid_shaped(conversation_id):
            session = await request.app.state.store.get_session(UUID(conversation_id), user_id)
        if not session:
            raise HTTPException(status_code=404, detail="Conversation not found")
        return ConversationResponse(
            id=str(session.id),
            created_at=session.created_at,
            messages=[MessageResponse(**m.model_dump()) for m in session.messages],
        )

    @app.post("/text/scan-crisis", response_model=ScanResponse)
    async def scan_crisis(body: ScanRequest, request: Request):
        """Advisory crisis keyword scan; no side effects"""
        result = request.app.state.scanner.scan(body.text)
        return ScanResponse(is_crisis=result.is_crisis, matched_keywords=result.matched_keywords)

    return app


app = create_app()
