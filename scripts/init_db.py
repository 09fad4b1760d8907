"""Initialize the database schema and seed the practice catalog"""

import asyncio

from loguru import logger

from engagement.catalog.practices import seed_practice_catalog
from engagement.core.config import settings
from engagement.core.logging_setup import configure_logging
from engagement.storage.sqlite_store import SQLiteEngagementStore


async def init_database() -> None:
    """Create the schema at settings.DB_PATH and seed the catalog once"""
    store = SQLiteEngagementStore(settings.DB_PATH)
    await store.connect()
    try:
        inserted = await seed_practice_catalog(store)
        stats = await store.get_stats()
    finally:
        await store.close()

    logger.info(f"Database ready at {settings.DB_PATH}")
    logger.info(f"Seeded {inserted} practices, stats: {stats}")


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(init_database())
