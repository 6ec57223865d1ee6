"""
Google Play adapter.

Uses the `google-play-scraper` library. Its calls are blocking, so each
one runs on the adapter's worker pool with the adapter timeout.

Pagination strategy:
  - Reviews sorted newest first, walked with the continuation token.
  - Pages are sequential with a short pause between them.
  - Stops on an empty page, a missing token, the page cap or the review cap.
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google_play_scraper import Sort
from google_play_scraper import app as gplay_app
from google_play_scraper import reviews as gplay_reviews
from google_play_scraper import search as gplay_search
from pydantic import ValidationError

from review_collector.adapters.base import SourceAdapter
from review_collector.adapters.regions import (
    GOOGLE_PLAY_PRIMARY_REGIONS,
    GOOGLE_PLAY_REGIONS,
    region_to_language,
)
from review_collector.core.config import settings
from review_collector.core.logging import logger, log_debug
from review_collector.schemas.review import AppSearchResult, Review, Store


class GooglePlayAdapter(SourceAdapter):
    """Reviews and search for the Google Play store."""

    store = Store.ANDROID
    supported_regions = GOOGLE_PLAY_REGIONS
    ingest_regions = GOOGLE_PLAY_PRIMARY_REGIONS

    def __init__(
        self,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
        max_reviews: Optional[int] = None,
        page_delay: Optional[float] = None,
        max_workers: Optional[int] = None,
    ):
        super().__init__(timeout, max_workers=max_workers)
        self.page_size = page_size or settings.ANDROID_PAGE_SIZE
        self.max_pages = max_pages or settings.ANDROID_MAX_PAGES
        self.max_reviews = max_reviews or settings.ANDROID_MAX_REVIEWS
        self.page_delay = settings.ANDROID_PAGE_DELAY_SECONDS if page_delay is None else page_delay

    async def search(self, query: str, region: str = "us", limit: Optional[int] = None) -> List[AppSearchResult]:
        limit = limit or settings.SEARCH_LIMIT
        try:
            results = await self._call(
                gplay_search,
                query,
                n_hits=limit,
                lang=region_to_language(region),
                country=region,
            )
        except Exception as e:
            logger.warning(
                f"Google Play search failed: {str(e)}",
                extra={"query": query, "region": region, "error_type": type(e).__name__},
            )
            return []

        apps = []
        for item in results or []:
            app_id = item.get("appId")
            if not app_id:
                continue
            apps.append(
                AppSearchResult(
                    id=app_id,
                    name=item.get("title") or app_id,
                    developer=item.get("developer") or "",
                    icon=item.get("icon"),
                    store=self.store,
                )
            )
        return apps[:limit]

    async def lookup_app_name(self, app_id: str, region: str) -> Optional[str]:
        try:
            details = await self._call(
                gplay_app,
                app_id,
                lang=region_to_language(region),
                country=region,
            )
        except Exception as e:
            logger.warning(
                f"Google Play app lookup failed: {str(e)}",
                extra={"app_id": app_id, "region": region, "error_type": type(e).__name__},
            )
            return None
        return details.get("title") or None

    async def fetch_region_reviews(self, app_id: str, region: str, app_name: str) -> List[Review]:
        lang = region_to_language(region)
        collected: Dict[str, Review] = {}
        token = None
        fetched = 0
        dropped = 0

        for page in range(self.max_pages):
            if page:
                await asyncio.sleep(self.page_delay)

            try:
                batch, token = await self._call(
                    gplay_reviews,
                    app_id,
                    lang=lang,
                    country=region,
                    sort=Sort.NEWEST,
                    count=self.page_size,
                    continuation_token=token,
                )
            except Exception as e:
                if page == 0:
                    raise
                # Later pages: keep what was already collected
                logger.warning(
                    f"Google Play review page failed: {str(e)}",
                    extra={"app_id": app_id, "region": region, "page": page + 1},
                )
                break

            if not batch:
                break

            fetched += len(batch)
            for raw in batch:
                review = self._to_review(raw, app_id=app_id, app_name=app_name, region=region)
                if review is None:
                    dropped += 1
                    continue
                collected[review.id] = review

            if fetched >= self.max_reviews or token is None or getattr(token, "token", None) is None:
                break

        logger.debug(
            "Google Play region fetched",
            extra={
                "app_id": app_id,
                "region": region,
                "fetched": fetched,
                "kept": len(collected),
                "dropped": dropped,
            },
        )
        return list(collected.values())

    def _to_review(self, raw: Dict[str, Any], app_id: str, app_name: str, region: str) -> Optional[Review]:
        """Convert a raw scraper dict; None if a required field is missing or invalid."""
        content = (raw.get("content") or "").strip()
        review_id = raw.get("reviewId")
        author = raw.get("userName")
        if not content or not review_id or not author:
            return None

        posted_at = raw.get("at")
        if isinstance(posted_at, datetime) and posted_at.tzinfo is None:
            # the scraper builds naive local-time datetimes
            posted_at = posted_at.astimezone(timezone.utc)

        try:
            return Review(
                id=str(review_id),
                store=self.store,
                region=region,
                app_id=app_id,
                app_name=app_name,
                rating=raw.get("score"),
                title="",
                content=content,
                author=author,
                date=posted_at,
                version=raw.get("reviewCreatedVersion") or raw.get("appVersion"),
                helpful=raw.get("thumbsUpCount"),
            )
        except ValidationError as e:
            log_debug("Dropping invalid Google Play review", review_id=review_id, errors=e.error_count())
            return None
