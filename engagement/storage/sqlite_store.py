"""SQLite store for activity events, badges, conversations and the practice catalog"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union
from uuid import UUID

import aiosqlite
from loguru import logger

from engagement.core.models import (
    ActivityAggregates,
    ActivityEvent,
    ActivityType,
    Badge,
    BadgeType,
    ConversationMessage,
    ConversationSession,
    MessageRole,
    PracticeCategory,
    PracticeItem,
    SessionSummary,
    as_utc,
)


def _ts(value: datetime) -> float:
    return as_utc(value).timestamp()


def _dt(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class SQLiteEngagementStore:
    """
    Persistence for the three engine entities plus the practice catalog.

    Features:
    - Append-only activity_events table (no UPDATE or DELETE paths)
    - badges keyed by (user_id, badge_type) so a duplicate award is a no-op
    - conversations and their messages, ordered by insertion
    - practices table filled once by an explicit seeding step

    Instants are stored as UTC epoch seconds.
    """

    def __init__(self, db_path: Union[Path, str]) -> None:
        self.db_path = Path(db_path)
        self._conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Establish database connection"""
        # Create parent directory if needed
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(str(self.db_path))
        self._conn.row_factory = aiosqlite.Row

        await self._setup_schema()
        logger.info(f"Connected to database: {self.db_path}")

    async def close(self) -> None:
        """Close database connection"""
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("Database connection closed")

    @property
    def conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Database not connected")
        return self._conn

    async def _setup_schema(self) -> None:
        """Create tables and indexes"""
        await self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS activity_events (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                activity_type TEXT NOT NULL,
                occurred_at REAL NOT NULL,
                category TEXT,
                item_id TEXT
            );
            CREATE INDEX IF NOT EXISTS idx_events_user_type
                ON activity_events(user_id, activity_type, occurred_at);

            CREATE TABLE IF NOT EXISTS badges (
                user_id TEXT NOT NULL,
                badge_type TEXT NOT NULL,
                earned_at REAL NOT NULL,
                PRIMARY KEY (user_id, badge_type)
            );

            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                created_at REAL NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_conversations_user
                ON conversations(user_id, created_at DESC);

            CREATE TABLE IF NOT EXISTS conversation_messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                conversation_id TEXT NOT NULL REFERENCES conversations(id),
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at REAL NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_messages_conversation
                ON conversation_messages(conversation_id, id);

            CREATE TABLE IF NOT EXISTS practices (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                category TEXT NOT NULL,
                duration TEXT NOT NULL,
                instructions TEXT NOT NULL
            );
        """)
        await self.conn.commit()
        logger.debug("Database schema initialized")

    # ── Activity events ─────────────────────────────────────────────────────

    async def insert_event(self, event: ActivityEvent) -> None:
        """Append an activity event"""
        await self.conn.execute(
            """
            INSERT INTO activity_events
            (id, user_id, activity_type, occurred_at, category, item_id)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                str(event.id),
                event.user_id,
                event.activity_type.value,
                _ts(event.occurred_at),
                event.category.value if event.category else None,
                event.item_id,
            ),
        )
        await self.conn.commit()
        logger.debug(
            f"Inserted event {event.id}: [{event.user_id}] [{event.activity_type.value}]"
        )

    async def get_event_times(
        self,
        user_id: str,
        activity_type: ActivityType,
    ) -> list[datetime]:
        """All occurrence instants for one user and activity type, oldest first"""
        cursor = await self.conn.execute(
            """
            SELECT occurred_at FROM activity_events
            WHERE user_id = ? AND activity_type = ?
            ORDER BY occurred_at
            """,
            (user_id, activity_type.value),
        )
        rows = await cursor.fetchall()
        return [_dt(row["occurred_at"]) for row in rows]

    async def get_latest_event_time(
        self,
        user_id: str,
        activity_type: ActivityType,
    ) -> Optional[datetime]:
        cursor = await self.conn.execute(
            """
            SELECT MAX(occurred_at) AS latest FROM activity_events
            WHERE user_id = ? AND activity_type = ?
            """,
            (user_id, activity_type.value),
        )
        row = await cursor.fetchone()
        if not row or row["latest"] is None:
            return None
        return _dt(row["latest"])

    async def get_aggregates(self, user_id: str) -> ActivityAggregates:
        """Totals by activity type, by practice category, and distinct items tried"""
        cursor = await self.conn.execute(
            """
            SELECT activity_type, COUNT(*) AS total FROM activity_events
            WHERE user_id = ?
            GROUP BY activity_type
            """,
            (user_id,),
        )
        by_type = {
            ActivityType(row["activity_type"]): row["total"]
            for row in await cursor.fetchall()
        }

        cursor = await self.conn.execute(
            """
            SELECT category, COUNT(*) AS total FROM activity_events
            WHERE user_id = ? AND activity_type = ? AND category IS NOT NULL
            GROUP BY category
            """,
            (user_id, ActivityType.PRACTICE_COMPLETION.value),
        )
        by_category = {
            PracticeCategory(row["category"]): row["total"]
            for row in await cursor.fetchall()
        }

        cursor = await self.conn.execute(
            """
            SELECT COUNT(DISTINCT item_id) AS tried FROM activity_events
            WHERE user_id = ? AND activity_type = ? AND item_id IS NOT NULL
            """,
            (user_id, ActivityType.PRACTICE_COMPLETION.value),
        )
        row = await cursor.fetchone()

        return ActivityAggregates(
            total_by_type=by_type,
            total_by_category=by_category,
            unique_items_tried=row["tried"] if row else 0,
        )

    # ── Badges ──────────────────────────────────────────────────────────────

    async def insert_badge(self, badge: Badge) -> bool:
        """
        Award a badge.

        Returns:
            True if a row was written, False if the user already held it
            (the primary key turns the losing insert of a race into a no-op)
        """
        cursor = await self.conn.execute(
            """
            INSERT OR IGNORE INTO badges (user_id, badge_type, earned_at)
            VALUES (?, ?, ?)
            """,
            (badge.user_id, badge.badge_type.value, _ts(badge.earned_at)),
        )
        await self.conn.commit()
        return cursor.rowcount == 1

    async def get_badges(self, user_id: str) -> list[Badge]:
        cursor = await self.conn.execute(
            "SELECT * FROM badges WHERE user_id = ? ORDER BY earned_at, rowid",
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [
            Badge(
                user_id=row["user_id"],
                badge_type=BadgeType(row["badge_type"]),
                earned_at=_dt(row["earned_at"]),
            )
            for row in rows
        ]

    # ── Conversations ───────────────────────────────────────────────────────

    async def create_session(self, session: ConversationSession) -> None:
        """Insert a session together with any messages it already holds"""
        try:
            await self.conn.execute(
                "INSERT INTO conversations (id, user_id, created_at) VALUES (?, ?, ?)",
                (str(session.id), session.user_id, _ts(session.created_at)),
            )
            await self.conn.executemany(
                """
                INSERT INTO conversation_messages
                (conversation_id, role, content, created_at)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (str(session.id), m.role.value, m.content, _ts(m.created_at))
                    for m in session.messages
                ],
            )
            await self.conn.commit()
        except Exception:
            await self.conn.rollback()
            raise
        logger.info(f"Created conversation {session.id} for user {session.user_id}")

    async def append_message(
        self,
        session_id: UUID,
        message: ConversationMessage,
    ) -> None:
        await self.conn.execute(
            """
            INSERT INTO conversation_messages
            (conversation_id, role, content, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (str(session_id), message.role.value, message.content, _ts(message.created_at)),
        )
        await self.conn.commit()
        logger.debug(f"Appended {message.role.value} message to conversation {session_id}")

    async def get_session(
        self,
        session_id: UUID,
        user_id: str,
    ) -> Optional[ConversationSession]:
        """Load a session with its messages, only if it belongs to user_id"""
        cursor = await self.conn.execute(
            "SELECT * FROM conversations WHERE id = ? AND user_id = ?",
            (str(session_id), user_id),
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return await self._load_session(row)

    async def get_latest_session(self, user_id: str) -> Optional[ConversationSession]:
        """Most recently created session for a user"""
        cursor = await self.conn.execute(
            """
            SELECT * FROM conversations
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """,
            (user_id,),
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return await self._load_session(row)

    async def list_sessions(self, user_id: str) -> list[SessionSummary]:
        """Sessions newest first, each with its last message"""
        cursor = await self.conn.execute(
            """
            SELECT c.id, c.created_at,
                   (SELECT m.content FROM conversation_messages m
                    WHERE m.conversation_id = c.id
                    ORDER BY m.id DESC LIMIT 1) AS last_message
            FROM conversations c
            WHERE c.user_id = ?
            ORDER BY c.created_at DESC, c.rowid DESC
            """,
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [
            SessionSummary(
                id=UUID(row["id"]),
                created_at=_dt(row["created_at"]),
                last_message=row["last_message"],
            )
            for row in rows
        ]

    async def get_recent_messages(
        self,
        session_id: UUID,
        limit: int,
    ) -> list[ConversationMessage]:
        """Last `limit` messages of a session, oldest first"""
        cursor = await self.conn.execute(
            """
            SELECT * FROM conversation_messages
            WHERE conversation_id = ?
            ORDER BY id DESC
            LIMIT ?
            """,
            (str(session_id), limit),
        )
        rows = await cursor.fetchall()
        return [self._row_to_message(row) for row in reversed(rows)]

    async def get_latest_user_message(self, user_id: str) -> Optional[ConversationMessage]:
        """Newest user-authored message across all of a user's sessions"""
        cursor = await self.conn.execute(
            """
            SELECT m.* FROM conversation_messages m
            JOIN conversations c ON c.id = m.conversation_id
            WHERE c.user_id = ? AND m.role = ?
            ORDER BY m.created_at DESC, m.id DESC
            LIMIT 1
            """,
            (user_id, MessageRole.USER.value),
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return self._row_to_message(row)

    async def _load_session(self, row: aiosqlite.Row) -> ConversationSession:
        cursor = await self.conn.execute(
            "SELECT * FROM conversation_messages WHERE conversation_id = ? ORDER BY id",
            (row["id"],),
        )
        messages = [self._row_to_message(m) for m in await cursor.fetchall()]
        return ConversationSession(
            id=UUID(row["id"]),
            user_id=row["user_id"],
            created_at=_dt(row["created_at"]),
            messages=messages,
        )

    def _row_to_message(self, row: aiosqlite.Row) -> ConversationMessage:
        return ConversationMessage(
            role=MessageRole(row["role"]),
            content=row["content"],
            created_at=_dt(row["created_at"]),
        )

    # ── Practice catalog ────────────────────────────────────────────────────

    async def seed_practices(self, items: Iterable[PracticeItem]) -> int:
        """Insert the catalog if the table is empty, in a single transaction"""
        await self.conn.execute("BEGIN IMMEDIATE")
        try:
            cursor = await self.conn.execute("SELECT COUNT(*) FROM practices")
            row = await cursor.fetchone()
            if row and row[0] > 0:
                await self.conn.rollback()
                return 0

            values = [
                (
                    item.id,
                    item.title,
                    item.description,
                    item.category.value,
                    item.duration,
                    item.instructions,
                )
                for item in items
            ]
            await self.conn.executemany(
                """
                INSERT INTO practices (id, title, description, category, duration, instructions)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                values,
            )
            await self.conn.commit()
        except Exception:
            await self.conn.rollback()
            raise
        return len(values)

    async def get_practices(
        self,
        category: Optional[PracticeCategory] = None,
    ) -> list[PracticeItem]:
        if category:
            cursor = await self.conn.execute(
                "SELECT * FROM practices WHERE category = ? ORDER BY category, id",
                (category.value,),
            )
        else:
            cursor = await self.conn.execute(
                "SELECT * FROM practices ORDER BY category, id"
            )
        rows = await cursor.fetchall()
        return [
            PracticeItem(
                id=row["id"],
                title=row["title"],
                description=row["description"],
                category=PracticeCategory(row["category"]),
                duration=row["duration"],
                instructions=row["instructions"],
            )
            for row in rows
        ]

    async def get_stats(self) -> dict[str, int]:
        """Row counts per table"""
        stats = {}
        for table in ["activity_events", "badges", "conversations", "conversation_messages"]:
            cursor = await self.conn.execute(f"SELECT COUNT(*) FROM {table}")
            row = await cursor.fetchone()
            stats[f"{table}_count"] = row[0] if row else 0
        return stats
