"""
HTTP tests for the /api routes with an in-memory review service.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from review_collector.main import create_app
from review_collector.schemas.review import AppSearchResult, Store
from review_collector.services import ReviewService
from review_collector.storage import BoundedMemoryStorage


@pytest.fixture
def service(make_review, fake_adapter):
    android = fake_adapter(
        {"us": [make_review("a", rating=5, minutes=1), make_review("b", rating=1, minutes=2)], "ru": RuntimeError("x")},
        search_results=[AppSearchResult(id="com.example.app", name="Example", store=Store.ANDROID)],
    )
    ios = fake_adapter({"us": []}, store=Store.IOS)
    return ReviewService(BoundedMemoryStorage(capacity=100), {Store.ANDROID: android, Store.IOS: ios})


@pytest.fixture
def client(service):
    app = create_app(use_lifespan=False)
    app.state.review_service = service
    return TestClient(app)


@pytest.fixture
def seeded(service, make_review):
    reviews = [make_review(f"r{i:02d}", rating=(i % 5) + 1, minutes=i) for i in range(25)]
    asyncio.run(service.storage.upsert(reviews))
    return reviews


def test_search(client):
    response = client.get("/api/search", params={"query": "example"})

    assert response.status_code == 200
    body = response.json()
    assert body["requestId"]
    assert response.headers["X-Request-Id"]
    assert body["data"] == [
        {"id": "com.example.app", "name": "Example", "developer": "", "icon": None, "store": "android"}
    ]


def test_search_requires_query(client):
    response = client.get("/api/search")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_ARGUMENT"


def test_parse(client):
    response = client.post("/api/parse", json={"appId": "com.example.app", "store": "android"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {item["id"] for item in body["data"]} == {"a", "b"}
    assert body["data"][0]["appId"] == "com.example.app"


def test_parse_rejects_unknown_store(client):
    response = client.post("/api/parse", json={"appId": "com.example.app", "store": "windows"})

    assert response.status_code == 422
    body = response.json()
    assert body["error"]["code"] == "INVALID_ARGUMENT"
    assert body["requestId"]


def test_reviews_pagination(client, seeded):
    response = client.get("/api/reviews", params={"limit": 10, "offset": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 25
    assert [item["id"] for item in body["data"]] == [f"r{i:02d}" for i in range(14, 4, -1)]


def test_reviews_default_limit(client, seeded):
    body = client.get("/api/reviews").json()

    assert body["total"] == 25
    assert len(body["data"]) == 25


def test_reviews_ratings_comma_and_repeated(client, seeded):
    response = client.get("/api/reviews", params=[("ratings", "4,5"), ("ratings", "1"), ("limit", "100")])

    body = response.json()
    assert response.status_code == 200
    assert {item["rating"] for item in body["data"]} == {1, 4, 5}
    assert body["total"] == 15


@pytest.mark.parametrize(
    "params",
    [
        {"limit": 5000},
        {"limit": 0},
        {"offset": -1},
        {"ratings": "9"},
        {"ratings": "five"},
        {"store": "windows"},
        {"startDate": "2024-02-01T00:00:00Z", "endDate": "2024-01-01T00:00:00Z"},
    ],
)
def test_reviews_invalid_params(client, params):
    response = client.get("/api/reviews", params=params)

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_ARGUMENT"


def test_export_csv(client, seeded):
    response = client.post("/api/export", json={"format": "csv", "appName": "Example", "ratings": [5]})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="reviews_Example_' in response.headers["content-disposition"]
    assert response.content.startswith("\ufeff".encode("utf-8"))
    lines = response.content.decode("utf-8").strip("\n").split("\n")
    assert len(lines) == 1 + 5


def test_export_json_total(client, seeded):
    response = client.post("/api/export", json={"format": "json", "total": 3})

    body = response.json()
    assert response.status_code == 200
    assert body["totalReviews"] == 3
    assert [item["id"] for item in body["reviews"]] == ["r24", "r23", "r22"]


def test_export_non_ascii_app_name(client, seeded):
    response = client.post("/api/export", json={"format": "json", "appName": "Пример"})

    disposition = response.headers["content-disposition"]
    assert response.status_code == 200
    assert 'filename="reviews_' + "_" * 6 + "_2" in disposition
    assert "filename*=UTF-8''reviews_%D0%9F" in disposition


def test_export_nothing_found(client):
    response = client.post("/api/export", json={"format": "csv"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NO_DATA"


def test_export_rejects_unknown_format(client, seeded):
    response = client.post("/api/export", json={"format": "xlsx"})

    assert response.status_code == 422


def test_regions(client):
    assert client.get("/api/regions", params={"store": "android"}).json()["data"] == ["us", "ru"]
    assert client.get("/api/regions").json()["data"] == ["ru", "us"]
