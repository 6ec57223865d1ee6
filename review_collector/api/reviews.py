"""
Review collection API endpoints.
"""
import re
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response
from pydantic import ValidationError

from review_collector.api.deps import get_review_service
from review_collector.core.config import settings
from review_collector.core.exceptions import InvalidArgumentException
from review_collector.core.logging import logger
from review_collector.core.middleware import get_request_id
from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.requests import (
    ExportRequest,
    IngestRequest,
    RegionsResponse,
    ReviewListResponse,
    SearchResponse,
)
from review_collector.schemas.review import Store
from review_collector.services.review_service import ReviewService


router = APIRouter(prefix="/api", tags=["reviews"])


def parse_ratings(values: Optional[List[str]]) -> Optional[List[int]]:
    """
    Accept ratings as a comma-separated list, repeated parameters, or both.

    "1,2" and ratings=1&ratings=2 both give [1, 2].
    """
    if not values:
        return None

    ratings = []
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                ratings.append(int(part))
            except ValueError:
                raise InvalidArgumentException(
                    f"Invalid rating: {part}",
                    details={"field": "ratings"},
                )
    return ratings or None


def build_filters(**fields) -> FilterSpec:
    """Build a FilterSpec, reporting validation problems as INVALID_ARGUMENT."""
    try:
        return FilterSpec(**fields)
    except ValidationError as e:
        raise InvalidArgumentException(
            "Invalid filter",
            details={
                "validation_errors": [
                    {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ]
            },
        )


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the UTF-8 original."""
    fallback = re.sub(r'[^A-Za-z0-9._-]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/search", response_model=SearchResponse)
async def search_apps(
    query: str = Query(..., min_length=1, description="Search term"),
    region: str = Query("us", description="Country code"),
    store: Optional[Store] = Query(None, description="Search a single store"),
    service: ReviewService = Depends(get_review_service),
):
    """
    Search apps by name.

    Without `store`, Google Play results come first, then App Store results.
    A store that fails contributes no results.
    """
    results = await service.search(query, region=region, store=store)
    return SearchResponse(request_id=get_request_id(), data=results)


@router.post("/parse", response_model=ReviewListResponse)
async def parse_reviews(
    request: IngestRequest,
    service: ReviewService = Depends(get_review_service),
):
    """
    Collect reviews for an app from one region, or from all of the store's ingest regions.

    Returns the deduplicated batch that was stored. Regions that fail are
    skipped, so the batch may be empty.
    """
    request_id = get_request_id()

    logger.info(
        "Processing ingestion request",
        extra={
            "request_id": request_id,
            "app_id": request.app_id,
            "store": request.store.value,
            "region": request.region,
        },
    )

    reviews = await service.ingest(request)
    return ReviewListResponse(request_id=request_id, data=reviews, total=len(reviews))


@router.get("/reviews", response_model=ReviewListResponse)
async def list_reviews(
    app_id: Optional[str] = Query(None, alias="appId"),
    store: Optional[Store] = Query(None),
    ratings: Optional[List[str]] = Query(None, description="Comma-separated or repeated, 1..5"),
    region: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    limit: int = Query(settings.DEFAULT_QUERY_LIMIT, ge=1, le=settings.MAX_QUERY_LIMIT),
    offset: int = Query(0, ge=0),
    service: ReviewService = Depends(get_review_service),
):
    """
    Query stored reviews, newest first.

    `total` is the number of matches before limit/offset are applied.
    """
    filters = build_filters(
        app_id=app_id,
        store=store,
        ratings=parse_ratings(ratings),
        region=region,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )

    result = await service.query(filters)
    return ReviewListResponse(request_id=get_request_id(), data=result.reviews, total=result.total)


@router.post("/export")
async def export_reviews(
    request: ExportRequest,
    service: ReviewService = Depends(get_review_service),
):
    """
    Download matching reviews as CSV or JSON.

    Raises:
        404: No reviews match the filter
        422: Invalid filter or format
    """
    filters = build_filters(
        app_id=request.app_id,
        store=request.store,
        ratings=request.ratings,
        region=request.region,
        start_date=request.start_date,
        end_date=request.end_date,
        limit=request.total or None,
    )

    exported = await service.export(filters, request.format, app_name=request.app_name)

    logger.info(
        "Export served",
        extra={
            "request_id": get_request_id(),
            "export_format": request.format.value,
            "export_filename": exported.filename,
        },
    )

    return Response(
        content=exported.content,
        media_type=exported.content_type,
        headers={"Content-Disposition": content_disposition(exported.filename)},
    )


@router.get("/regions", response_model=RegionsResponse)
async def list_regions(
    store: Optional[Store] = Query(None),
    service: ReviewService = Depends(get_review_service),
):
    """Regions reviews can be collected from, for one store or for all of them."""
    return RegionsResponse(request_id=get_request_id(), data=service.available_regions(store))
