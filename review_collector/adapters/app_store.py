"""
Apple App Store adapter.

Search and app lookup go through the iTunes Search API; reviews come from
the public customer-reviews RSS JSON feed:
  https://itunes.apple.com/{region}/rss/customerreviews/page={page}/id={app_id}/sortby=mostrecent/json

The feed has no cursor, so a fixed set of pages is requested concurrently
and each page may fail on its own.
"""
import asyncio
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from review_collector.adapters.base import SourceAdapter
from review_collector.adapters.regions import APP_STORE_REGIONS
from review_collector.core.config import settings
from review_collector.core.logging import logger, log_debug, log_warning
from review_collector.schemas.review import AppSearchResult, Review, Store

BASE_URL = "https://itunes.apple.com"
REVIEWS_FEED_URL = BASE_URL + "/{region}/rss/customerreviews/page={page}/id={app_id}/sortby=mostrecent/json"


def _label(node: Any) -> Optional[str]:
    """Feed values are wrapped as {"label": ...}."""
    if isinstance(node, dict):
        return node.get("label")
    return None


class AppStoreAdapter(SourceAdapter):
    """Reviews and search for the Apple App Store."""

    store = Store.IOS
    supported_regions = APP_STORE_REGIONS
    ingest_regions = APP_STORE_REGIONS

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_pages: Optional[int] = None,
        session: Optional[requests.Session] = None,
        max_workers: Optional[int] = None,
    ):
        super().__init__(timeout, max_workers=max_workers)
        self.max_pages = max_pages or settings.IOS_MAX_PAGES
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": "Mozilla/5.0"})
        self._closed = False

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self._session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    async def search(self, query: str, region: str = "us", limit: Optional[int] = None) -> List[AppSearchResult]:
        limit = limit or settings.SEARCH_LIMIT
        try:
            data = await self._call(
                self._get_json,
                f"{BASE_URL}/search",
                {"term": query, "country": region, "entity": "software", "limit": limit},
            )
        except Exception as e:
            logger.warning(
                f"App Store search failed: {str(e)}",
                extra={"query": query, "region": region, "error_type": type(e).__name__},
            )
            return []

        apps = []
        for item in data.get("results", []):
            track_id = item.get("trackId")
            if track_id is None:
                continue
            apps.append(
                AppSearchResult(
                    id=str(track_id),
                    name=item.get("trackName") or str(track_id),
                    developer=item.get("artistName") or "",
                    icon=item.get("artworkUrl100"),
                    store=self.store,
                )
            )
        return apps[:limit]

    async def lookup_app_name(self, app_id: str, region: str) -> Optional[str]:
        try:
            data = await self._call(self._get_json, f"{BASE_URL}/lookup", {"id": app_id, "country": region})
        except Exception as e:
            logger.warning(
                f"App Store lookup failed: {str(e)}",
                extra={"app_id": app_id, "region": region, "error_type": type(e).__name__},
            )
            return None

        results = data.get("results") or []
        if not results:
            return None
        return results[0].get("trackName") or None

    async def fetch_region_reviews(self, app_id: str, region: str, app_name: str) -> List[Review]:
        pages = await asyncio.gather(
            *(self._fetch_page(app_id, region, page) for page in range(1, self.max_pages + 1))
        )

        collected: Dict[str, Review] = {}
        dropped = 0
        for entries in pages:
            for entry in entries:
                review = self._to_review(entry, app_id=app_id, app_name=app_name, region=region)
                if review is None:
                    dropped += 1
                    continue
                collected[review.id] = review

        logger.debug(
            "App Store region fetched",
            extra={"app_id": app_id, "region": region, "kept": len(collected), "dropped": dropped},
        )
        return list(collected.values())

    async def _fetch_page(self, app_id: str, region: str, page: int) -> List[Dict[str, Any]]:
        """One feed page; a failed page yields no entries."""
        url = REVIEWS_FEED_URL.format(region=region, page=page, app_id=app_id)
        try:
            data = await self._call(self._get_json, url)
        except Exception as e:
            log_warning(
                f"App Store review page failed: {str(e)}",
                app_id=app_id,
                region=region,
                page=page,
                error_type=type(e).__name__,
            )
            return []

        entries = (data.get("feed") or {}).get("entry") or []
        # A feed with a single entry returns an object instead of a list
        if isinstance(entries, dict):
            entries = [entries]
        return entries

    def _to_review(self, entry: Dict[str, Any], app_id: str, app_name: str, region: str) -> Optional[Review]:
        """Convert a feed entry; None for the app metadata entry or an incomplete review."""
        if "im:rating" not in entry:
            return None

        review_id = _label(entry.get("id"))
        content = _label(entry.get("content"))
        author = _label((entry.get("author") or {}).get("name"))
        if not review_id or not content or not content.strip() or not author:
            return None

        try:
            return Review(
                id=review_id,
                store=self.store,
                region=region,
                app_id=app_id,
                app_name=app_name,
                rating=_label(entry.get("im:rating")),
                title=_label(entry.get("title")) or "",
                content=content,
                author=author,
                date=_label(entry.get("updated")),
                version=_label(entry.get("im:version")),
                helpful=_label(entry.get("im:voteCount")) or 0,
            )
        except ValidationError as e:
            log_debug("Dropping invalid App Store review", review_id=review_id, errors=e.error_count())
            return None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._session.close()
        super().close()
