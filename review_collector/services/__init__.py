"""
Services package.
Ingestion, query and export orchestration.
"""
from review_collector.services.export_service import ExportSerializer, ExportResult, export_serializer
from review_collector.services.review_service import ReviewService

__all__ = [
    "ExportSerializer",
    "ExportResult",
    "export_serializer",
    "ReviewService",
]
