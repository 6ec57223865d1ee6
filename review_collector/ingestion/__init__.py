"""
Ingestion pipeline: regional fan-out and batch deduplication.
"""
from review_collector.ingestion.fanout import RegionalFanOut, FanOutResult
from review_collector.ingestion.merge import merge_reviews

__all__ = [
    "RegionalFanOut",
    "FanOutResult",
    "merge_reviews",
]
