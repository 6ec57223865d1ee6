"""
Pydantic schemas package.
Exports the canonical records, query filter and request/response models.
"""
from review_collector.schemas.review import Review, ReviewKey, AppSearchResult, Store, as_utc
from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.requests import (
    ExportFormat,
    IngestRequest,
    ExportRequest,
    ReviewListResponse,
    SearchResponse,
    RegionsResponse,
)
from review_collector.schemas.error import ErrorCode, ErrorDetail, ErrorResponse, ERROR_CODE_TO_HTTP_STATUS

__all__ = [
    # Review
    "Review",
    "ReviewKey",
    "AppSearchResult",
    "Store",
    "as_utc",
    # Query
    "FilterSpec",
    # Requests / responses
    "ExportFormat",
    "IngestRequest",
    "ExportRequest",
    "ReviewListResponse",
    "SearchResponse",
    "RegionsResponse",
    # Error
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "ERROR_CODE_TO_HTTP_STATUS",
]
