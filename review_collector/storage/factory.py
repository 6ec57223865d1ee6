"""
Startup-time selection of the storage backend.
"""
from typing import Optional

from sqlalchemy.engine import make_url

from review_collector.core.config import Settings, settings
from review_collector.core.logging import logger, log_error
from review_collector.storage.base import ReviewStorage
from review_collector.storage.memory import BoundedMemoryStorage
from review_collector.storage.sql import SQLReviewStorage


async def create_storage(config: Optional[Settings] = None) -> ReviewStorage:
    """
    Build the review storage.

    The database backend is preferred. If it cannot be initialised the
    bounded in-memory backend is returned instead; this decision is made
    once, at startup, and is not retried per request.
    """
    config = config or settings

    if config.USE_MEMORY_STORAGE:
        logger.info(
            "In-memory review storage selected by configuration",
            extra={"capacity": config.MEMORY_STORE_CAPACITY},
        )
        return BoundedMemoryStorage(capacity=config.MEMORY_STORE_CAPACITY)

    safe_url = make_url(config.DATABASE_URL).render_as_string(hide_password=True)
    try:
        storage = await SQLReviewStorage.create(config.DATABASE_URL)
    except Exception as e:
        log_error(
            "Database unavailable, falling back to in-memory review storage",
            error=e,
            database_url=safe_url,
            capacity=config.MEMORY_STORE_CAPACITY,
        )
        return BoundedMemoryStorage(capacity=config.MEMORY_STORE_CAPACITY)

    logger.info("Database review storage initialized", extra={"database_url": safe_url})
    return storage
