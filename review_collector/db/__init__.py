"""
Database engine and session helpers.
"""
from review_collector.db.database import Base, create_engine, create_session_factory, init_db, close_db

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "init_db",
    "close_db",
]
