"""
SQLAlchemy models package.
Exports all database models for easy import.
"""
from review_collector.models.review import ReviewRecord
from review_collector.models.app import AppRecord

__all__ = [
    "ReviewRecord",
    "AppRecord",
]
