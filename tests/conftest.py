"""
Shared fixtures: review builders and an offline source adapter.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Union

import pytest

from review_collector.adapters.base import SourceAdapter
from review_collector.schemas.review import AppSearchResult, Review, Store

BASE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def build_review(
    review_id: str = "r1",
    store: Store = Store.ANDROID,
    region: str = "us",
    app_id: str = "com.example.app",
    app_name: str = "Example",
    rating: int = 5,
    content: str = "Works well",
    minutes: int = 0,
    **overrides,
) -> Review:
    """Review dated BASE_DATE + `minutes`."""
    fields = dict(
        id=review_id,
        store=store,
        region=region,
        app_id=app_id,
        app_name=app_name,
        rating=rating,
        title="",
        content=content,
        author="Alice",
        date=BASE_DATE + timedelta(minutes=minutes),
        version="1.0",
        helpful=0,
    )
    fields.update(overrides)
    return Review(**fields)


class FakeAdapter(SourceAdapter):
    """
    Adapter returning canned reviews per region.

    A region mapped to an exception raises it from fetch_region_reviews.
    """

    def __init__(
        self,
        by_region: Dict[str, Union[List[Review], Exception]],
        store: Store = Store.ANDROID,
        name: Optional[str] = "Example",
        search_results: Optional[List[AppSearchResult]] = None,
    ):
        super().__init__(timeout=1.0)
        self.store = store
        self.by_region = by_region
        self.supported_regions = tuple(by_region)
        self.ingest_regions = tuple(by_region)
        self.name = name
        self.search_results = search_results or []
        self.calls: List[str] = []
        self.closed = False

    async def search(self, query, region="us", limit=None):
        return list(self.search_results)

    async def lookup_app_name(self, app_id, region):
        return self.name

    async def fetch_region_reviews(self, app_id, region, app_name):
        self.calls.append(region)
        outcome = self.by_region.get(region, [])
        if isinstance(outcome, Exception):
            raise outcome
        return [review.model_copy(update={"app_name": app_name}) for review in outcome]

    def close(self):
        self.closed = True
        super().close()


@pytest.fixture
def make_review():
    return build_review


@pytest.fixture
def fake_adapter():
    return FakeAdapter
