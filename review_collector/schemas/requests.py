"""
Pydantic schemas for the HTTP surface: ingestion, query, export and search.
"""
from typing import Optional, List
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator, ConfigDict

from review_collector.schemas.review import Review, AppSearchResult, Store


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"


class IngestRequest(BaseModel):
    """
    Ingestion request.
    POST /api/parse
    """

    app_id: str = Field(..., alias="appId", min_length=1, description="Store app ID")
    store: Store = Field(..., description="Review source")
    app_name: Optional[str] = Field(
        None, alias="appName", description="Display name stored on every review instead of the store title"
    )
    region: Optional[str] = Field(None, description="Single region to fetch; all regions when omitted")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("app_name", "region")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("region")
    @classmethod
    def lower_region(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class ExportRequest(BaseModel):
    """
    Export request.
    POST /api/export
    """

    app_id: Optional[str] = Field(None, alias="appId")
    app_name: Optional[str] = Field(None, alias="appName", description="Used in the export filename")
    store: Optional[Store] = None
    ratings: Optional[List[int]] = None
    region: Optional[str] = None
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    format: ExportFormat = ExportFormat.CSV
    total: Optional[int] = Field(None, ge=0, description="Maximum number of reviews to export")

    model_config = ConfigDict(populate_by_name=True)


class ReviewListResponse(BaseModel):
    """Reviews plus the total count before pagination."""

    request_id: str = Field(..., alias="requestId")
    data: List[Review]
    total: int

    model_config = ConfigDict(populate_by_name=True)


class SearchResponse(BaseModel):
    """Merged app search results across the requested stores."""

    request_id: str = Field(..., alias="requestId")
    data: List[AppSearchResult]

    model_config = ConfigDict(populate_by_name=True)


class RegionsResponse(BaseModel):
    """Regions a store can be scraped from."""

    request_id: str = Field(..., alias="requestId")
    data: List[str]

    model_config = ConfigDict(populate_by_name=True)
