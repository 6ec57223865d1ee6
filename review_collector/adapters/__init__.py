"""
Review source adapters.
"""
from review_collector.adapters.base import SourceAdapter
from review_collector.adapters.google_play import GooglePlayAdapter
from review_collector.adapters.app_store import AppStoreAdapter
from review_collector.adapters.regions import region_to_language

__all__ = [
    "SourceAdapter",
    "GooglePlayAdapter",
    "AppStoreAdapter",
    "region_to_language",
]
