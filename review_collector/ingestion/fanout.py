"""
Regional fan-out: one concurrent adapter call per region, joined before merging.
"""
import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from review_collector.core.config import settings
from review_collector.core.logging import logger, log_warning
from review_collector.schemas.review import Review

if TYPE_CHECKING:
    from review_collector.adapters.base import SourceAdapter


@dataclass
class FanOutResult:
    """Combined output of one ingestion run, before deduplication."""

    reviews: List[Review]
    regions: List[str]
    failed_regions: List[str] = field(default_factory=list)


class RegionalFanOut:
    """
    Run one adapter across many regions at once.

    A region whose call raises contributes no reviews; it never cancels
    the other regions or fails the run. `run()` returns only after every
    region call has finished.
    """

    def __init__(self, adapter: "SourceAdapter", max_concurrency: Optional[int] = None):
        self.adapter = adapter
        self.max_concurrency = max_concurrency or settings.FANOUT_MAX_CONCURRENCY

    async def run(
        self,
        app_id: str,
        region: Optional[str] = None,
        app_name: Optional[str] = None,
    ) -> FanOutResult:
        """
        Fetch reviews for `app_id` from `region`, or from every ingest region.

        Args:
            app_id: Store app ID
            region: Single region to fetch; None means the adapter's ingest regions
            app_name: Caller-supplied display name; overrides the store title on every review

        Returns:
            FanOutResult with the raw combined batch in region order
        """
        regions = [region] if region else list(self.adapter.ingest_regions)
        store = self.adapter.store.value

        display_name = app_name or await self.adapter.lookup_app_name(app_id, regions[0]) or app_id

        logger.info(
            "Starting regional fan-out",
            extra={"app_id": app_id, "store": store, "regions": regions},
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        failed: List[str] = []

        async def fetch_one(current_region: str) -> List[Review]:
            async with semaphore:
                try:
                    return await self.adapter.fetch_region_reviews(app_id, current_region, display_name)
                except Exception as e:
                    failed.append(current_region)
                    log_warning(
                        f"Region fetch failed: {str(e)}",
                        app_id=app_id,
                        store=store,
                        region=current_region,
                        error_type=type(e).__name__,
                    )
                    return []

        per_region = await asyncio.gather(*(fetch_one(r) for r in regions))

        batch = [review for region_reviews in per_region for review in region_reviews]
        if app_name:
            batch = [
                review if review.app_name == app_name else review.model_copy(update={"app_name": app_name})
                for review in batch
            ]

        logger.info(
            "Regional fan-out finished",
            extra={
                "app_id": app_id,
                "store": store,
                "fetched": len(batch),
                "per_region": {r: len(items) for r, items in zip(regions, per_region)},
                "failed_regions": failed,
            },
        )

        return FanOutResult(reviews=batch, regions=regions, failed_regions=sorted(failed))
