"""
Tests for the review service facade, end to end over the memory backend.
"""
import asyncio

import pytest

from review_collector.core.exceptions import InvalidArgumentException, NothingToExportException
from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.requests import ExportFormat, IngestRequest
from review_collector.schemas.review import AppSearchResult, Store
from review_collector.services import ReviewService
from review_collector.storage import BoundedMemoryStorage


@pytest.fixture
def service(make_review, fake_adapter):
    android = fake_adapter(
        {
            "us": [make_review("a", minutes=1), make_review("b", minutes=2)],
            "ru": RuntimeError("region blocked"),
        },
        search_results=[AppSearchResult(id="com.example.app", name="Example", store=Store.ANDROID)],
    )
    ios = fake_adapter(
        {"us": [make_review("100", store=Store.IOS, app_id="123")]},
        store=Store.IOS,
        search_results=[AppSearchResult(id="123", name="Example iOS", store=Store.IOS)],
    )
    return ReviewService(BoundedMemoryStorage(capacity=100), {Store.ANDROID: android, Store.IOS: ios})


def test_ingest_query_export_scenario(service):
    async def scenario():
        batch = await service.ingest(IngestRequest(app_id="com.example.app", store="android"))
        page = await service.query(FilterSpec(app_id="com.example.app"))
        exported = await service.export(FilterSpec(app_id="com.example.app"), ExportFormat.CSV)
        return batch, page, exported

    batch, page, exported = asyncio.run(scenario())

    assert sorted(r.id for r in batch) == ["a", "b"]
    assert page.total == 2
    assert [r.id for r in page.reviews] == ["b", "a"]

    lines = exported.content.decode("utf-8").lstrip("\ufeff").strip("\n").split("\n")
    assert len(lines) == 3
    assert lines[0].startswith("ID;App Name;Store")


def test_reingest_does_not_duplicate(service):
    request = IngestRequest(app_id="com.example.app", store="android", region="us")

    async def scenario():
        await service.ingest(request)
        await service.ingest(request)
        return await service.query(FilterSpec())

    assert asyncio.run(scenario()).total == 2


def test_ingest_uses_supplied_app_name(service):
    request = IngestRequest(app_id="com.example.app", store="android", app_name="Custom")

    reviews = asyncio.run(service.ingest(request))

    assert {r.app_name for r in reviews} == {"Custom"}


def test_ingest_uses_cached_catalog_name(service):
    async def scenario():
        await service.storage.upsert_apps(
            [AppSearchResult(id="com.example.app", name="Cached Name", store=Store.ANDROID)]
        )
        return await service.ingest(IngestRequest(app_id="com.example.app", store="android"))

    assert {r.app_name for r in asyncio.run(scenario())} == {"Cached Name"}


def test_unknown_store_rejected(service):
    with pytest.raises(InvalidArgumentException):
        service.available_regions("windows")

    with pytest.raises(InvalidArgumentException):
        asyncio.run(service.search("notes", store="windows"))


def test_search_merges_android_first_and_caches(service):
    async def scenario():
        results = await service.search("example")
        cached = await service.storage.get_app("123", Store.IOS)
        return results, cached

    results, cached = asyncio.run(scenario())

    assert [r.store for r in results] == [Store.ANDROID, Store.IOS]
    assert cached.name == "Example iOS"


def test_search_single_store(service):
    results = asyncio.run(service.search("example", store=Store.IOS))

    assert [r.id for r in results] == ["123"]


def test_search_rejects_empty_query(service):
    with pytest.raises(InvalidArgumentException):
        asyncio.run(service.search("   "))


def test_export_with_no_matches(service):
    with pytest.raises(NothingToExportException):
        asyncio.run(service.export(FilterSpec(app_id="missing"), ExportFormat.JSON))


def test_export_ignores_offset_and_respects_total(service, make_review):
    async def scenario():
        await service.storage.upsert([make_review(f"r{i}", minutes=i) for i in range(5)])
        return await service.export(FilterSpec(limit=2, offset=3), ExportFormat.CSV)

    exported = asyncio.run(scenario())
    lines = exported.content.decode("utf-8").lstrip("\ufeff").strip("\n").split("\n")

    assert [line.split(";")[0] for line in lines[1:]] == ["r4", "r3"]


def test_available_regions(service):
    assert service.available_regions(Store.ANDROID) == ["us", "ru"]
    assert service.available_regions() == ["ru", "us"]


def test_close_releases_adapters_and_storage(service, make_review):
    async def scenario():
        await service.storage.upsert([make_review()])
        await service.close()
        return await service.storage.count()

    assert asyncio.run(scenario()) == 0
    assert all(adapter.closed for adapter in service.adapters.values())
