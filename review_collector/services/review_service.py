"""
Review service.

Facade used by the HTTP layer: search the stores, ingest reviews for an
app, query stored reviews and export them.
"""
from typing import Dict, List, Optional, Union

from review_collector.adapters.base import SourceAdapter
from review_collector.core.config import settings
from review_collector.core.exceptions import InvalidArgumentException, NothingToExportException
from review_collector.core.logging import logger, log_error, log_info
from review_collector.ingestion import RegionalFanOut, merge_reviews
from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.requests import ExportFormat, IngestRequest
from review_collector.schemas.review import AppSearchResult, Review, Store
from review_collector.services.export_service import ExportResult, ExportSerializer
from review_collector.storage.base import QueryResult, ReviewStorage


class ReviewService:
    """
    Coordinates adapters, the storage engine and the export serializer.

    Holds no per-request state; one instance lives for the application.
    """

    def __init__(
        self,
        storage: ReviewStorage,
        adapters: Dict[Store, SourceAdapter],
        serializer: Optional[ExportSerializer] = None,
    ):
        self.storage = storage
        self.adapters = adapters
        self.serializer = serializer or ExportSerializer()

    def _adapter(self, store: Union[Store, str, None]) -> SourceAdapter:
        """Resolve a store name to its adapter."""
        if not store:
            raise InvalidArgumentException(
                "store is required",
                details={"allowed": [s.value for s in Store]},
            )
        try:
            key = Store(store)
        except ValueError:
            raise InvalidArgumentException(
                f"Unknown store: {store}",
                details={"allowed": [s.value for s in Store]},
            )
        adapter = self.adapters.get(key)
        if adapter is None:
            raise InvalidArgumentException(
                f"Store not configured: {key.value}",
                details={"configured": [s.value for s in self.adapters]},
            )
        return adapter

    async def search(
        self,
        query: str,
        region: str = "us",
        store: Union[Store, str, None] = None,
    ) -> List[AppSearchResult]:
        """
        Search one store, or every configured store with Android first.

        Store failures yield no results for that store. Found apps are
        cached in the catalog; a caching failure does not fail the search.
        """
        query = (query or "").strip()
        if not query:
            raise InvalidArgumentException("query must not be empty", details={"field": "query"})
        region = (region or "us").strip().lower()

        if store:
            adapters = [self._adapter(store)]
        else:
            adapters = [self.adapters[s] for s in (Store.ANDROID, Store.IOS) if s in self.adapters]

        results: List[AppSearchResult] = []
        for adapter in adapters:
            results.extend(await adapter.search(query, region=region, limit=settings.SEARCH_LIMIT))
        results = results[: settings.SEARCH_LIMIT]

        if results:
            try:
                await self.storage.upsert_apps(results)
            except Exception as e:
                log_error("Failed to cache search results", error=e, query=query, result_count=len(results))

        logger.info(
            "App search completed",
            extra={"query": query, "region": region, "result_count": len(results)},
        )
        return results

    async def ingest(self, request: IngestRequest) -> List[Review]:
        """
        Fetch, deduplicate and persist reviews for one app.

        Returns the canonical batch that was written.
        """
        adapter = self._adapter(request.store)

        app_name = request.app_name
        if not app_name:
            cached = await self.storage.get_app(request.app_id, adapter.store)
            app_name = cached.name if cached else None

        result = await RegionalFanOut(adapter).run(request.app_id, region=request.region, app_name=app_name)
        reviews = merge_reviews(result.reviews)
        await self.storage.upsert(reviews)

        log_info(
            "Ingestion completed",
            app_id=request.app_id,
            store=adapter.store.value,
            regions=result.regions,
            failed_regions=result.failed_regions,
            fetched=len(result.reviews),
            stored=len(reviews),
            backend=self.storage.backend_name,
        )
        return reviews

    async def query(self, filters: FilterSpec) -> QueryResult:
        return await self.storage.query(filters)

    async def export(
        self,
        filters: FilterSpec,
        export_format: Union[ExportFormat, str] = ExportFormat.CSV,
        app_name: Optional[str] = None,
    ) -> ExportResult:
        """
        Export every review matching `filters`, newest first.

        The filter's limit is capped at MAX_EXPORT_TOTAL and its offset
        is ignored.

        Raises:
            NothingToExportException: If no review matches
            InvalidArgumentException: If the format is not supported
        """
        limit = min(filters.limit or settings.MAX_EXPORT_TOTAL, settings.MAX_EXPORT_TOTAL)
        filters = filters.model_copy(update={"limit": limit, "offset": 0})

        result = await self.storage.query(filters)
        if not result.reviews:
            raise NothingToExportException(
                details={"total": result.total},
            )

        return self.serializer.render(result.reviews, export_format, app_name=app_name)

    def available_regions(self, store: Union[Store, str, None] = None) -> List[str]:
        """Supported regions for one store, or the sorted union across stores."""
        if store:
            return list(self._adapter(store).supported_regions)

        regions = set()
        for adapter in self.adapters.values():
            regions.update(adapter.supported_regions)
        return sorted(regions)

    async def close(self) -> None:
        for adapter in self.adapters.values():
            adapter.close()
        await self.storage.close()
