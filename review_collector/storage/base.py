"""
Storage contract shared by the durable and the in-memory backends.
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, NamedTuple, Optional

from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.review import AppSearchResult, Review, Store


class QueryResult(NamedTuple):
    """A page of reviews plus the number of matches before pagination."""

    reviews: List[Review]
    total: int


def sort_key(review: Review):
    """Ordering used by every backend; queries return it descending (newest first)."""
    return (review.date, review.store.value, review.region, review.id)


class ReviewStorage(ABC):
    """
    Review store.

    Both backends must give the same answers for the same data:
    - upsert() inserts or replaces by (id, store, region)
    - query() filters, sorts by date descending, counts, then paginates
    """

    backend_name: str = "abstract"

    @abstractmethod
    async def upsert(self, reviews: Iterable[Review]) -> None:
        """Insert or replace every review by its (id, store, region) key."""

    @abstractmethod
    async def query(self, filters: FilterSpec) -> QueryResult:
        """Return the requested page and the total number of matching reviews."""

    @abstractmethod
    async def count(self) -> int:
        """Number of reviews currently stored."""

    @abstractmethod
    async def upsert_apps(self, apps: Iterable[AppSearchResult]) -> None:
        """Cache search results in the apps catalog."""

    @abstractmethod
    async def get_app(self, app_id: str, store: Store) -> Optional[AppSearchResult]:
        """Look up a cached catalog entry."""

    @abstractmethod
    async def close(self) -> None:
        """Release held resources. Safe to call more than once."""
