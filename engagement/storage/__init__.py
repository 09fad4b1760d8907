"""Persistence layer"""

from engagement.storage.sqlite_store import SQLiteEngagementStore

__all__ = ["SQLiteEngagementStore"]
