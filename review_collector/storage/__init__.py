"""
Review storage package.
Durable SQL backend, bounded in-memory fallback, and the startup selector.
"""
from review_collector.storage.base import ReviewStorage, QueryResult
from review_collector.storage.memory import BoundedMemoryStorage
from review_collector.storage.sql import SQLReviewStorage
from review_collector.storage.factory import create_storage

__all__ = [
    "ReviewStorage",
    "QueryResult",
    "BoundedMemoryStorage",
    "SQLReviewStorage",
    "create_storage",
]
