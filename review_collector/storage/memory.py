"""
Bounded in-memory review storage, used when the database cannot be initialised.

Handles:
- Upsert by (id, store, region) key
- A date-ordered index kept sorted with bisect
- Oldest-first eviction once the capacity is exceeded
- Mutual exclusion between concurrent readers and writers
"""
import asyncio
from bisect import bisect_left, insort
from typing import Dict, Iterable, List, Optional, Tuple

from review_collector.core.config import settings
from review_collector.core.logging import logger
from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.review import AppSearchResult, Review, ReviewKey, Store
from review_collector.storage.base import QueryResult, ReviewStorage, sort_key


def _key_from_index(entry: tuple) -> ReviewKey:
    # index entries are (date, store, region, id)
    return (entry[3], entry[1], entry[2])


class BoundedMemoryStorage(ReviewStorage):
    """
    In-memory review store capped at `capacity` records.

    When an upsert pushes the size over the cap, the oldest reviews by
    date are evicted until the cap holds again. A review older than
    everything retained may therefore be evicted by the same call that
    inserted it.
    """

    backend_name = "memory"

    def __init__(self, capacity: Optional[int] = None):
        capacity = settings.MEMORY_STORE_CAPACITY if capacity is None else capacity
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self.capacity = capacity
        self._reviews: Dict[ReviewKey, Review] = {}
        self._index: List[tuple] = []  # ascending by sort_key: oldest first
        self._apps: Dict[Tuple[str, str], AppSearchResult] = {}
        self._lock = asyncio.Lock()

    async def upsert(self, reviews: Iterable[Review]) -> None:
        async with self._lock:
            written = 0
            for review in reviews:
                existing = self._reviews.get(review.key)
                if existing is not None:
                    self._remove_from_index(existing)
                self._reviews[review.key] = review
                insort(self._index, sort_key(review))
                written += 1

            evicted = self._evict_oldest()

        logger.debug(
            "Reviews upserted into memory storage",
            extra={"written": written, "evicted": evicted, "size": len(self._reviews)},
        )

    async def query(self, filters: FilterSpec) -> QueryResult:
        async with self._lock:
            matched = [
                review
                for review in (self._reviews[_key_from_index(e)] for e in reversed(self._index))
                if filters.matches(review)
            ]

        total = len(matched)
        end = None if filters.limit is None else filters.offset + filters.limit
        return QueryResult(reviews=matched[filters.offset:end], total=total)

    async def count(self) -> int:
        async with self._lock:
            return len(self._reviews)

    async def upsert_apps(self, apps: Iterable[AppSearchResult]) -> None:
        async with self._lock:
            for app in apps:
                self._apps[(app.id, app.store.value)] = app

    async def get_app(self, app_id: str, store: Store) -> Optional[AppSearchResult]:
        async with self._lock:
            return self._apps.get((app_id, store.value))

    async def close(self) -> None:
        async with self._lock:
            self._reviews.clear()
            self._index.clear()
            self._apps.clear()

    def _remove_from_index(self, review: Review) -> None:
        entry = sort_key(review)
        position = bisect_left(self._index, entry)
        if position < len(self._index) and self._index[position] == entry:
            del self._index[position]

    def _evict_oldest(self) -> int:
        overflow = len(self._index) - self.capacity
        if overflow <= 0:
            return 0

        for entry in self._index[:overflow]:
            del self._reviews[_key_from_index(entry)]
        del self._index[:overflow]
        return overflow
