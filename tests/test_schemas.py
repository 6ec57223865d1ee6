"""
Tests for review and filter validation.
"""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.requests import IngestRequest
from review_collector.schemas.review import Review, Store


def test_review_requires_valid_rating(make_review):
    with pytest.raises(ValidationError):
        make_review(rating=6)
    with pytest.raises(ValidationError):
        make_review(rating=0)


def test_review_rejects_blank_content(make_review):
    with pytest.raises(ValidationError):
        make_review(content="   ")


def test_review_date_normalized_to_utc(make_review):
    local = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))

    review = make_review(date=local)

    assert review.date == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    assert review.date.tzinfo == timezone.utc


def test_review_key_includes_region(make_review):
    assert make_review("r1", region="RU").key == ("r1", "android", "ru")


def test_review_accepts_camel_case():
    review = Review.model_validate(
        {
            "id": "1",
            "store": "ios",
            "region": "us",
            "appId": "123",
            "appName": "Example",
            "rating": 3,
            "content": "ok",
            "date": "2024-01-01T00:00:00Z",
        }
    )

    assert review.store == Store.IOS
    assert review.app_id == "123"
    assert review.helpful is None


def test_filter_rejects_bad_ratings():
    with pytest.raises(ValidationError):
        FilterSpec(ratings={0, 3})


def test_filter_empty_values_mean_no_constraint():
    spec = FilterSpec(ratings=set(), region="  ")

    assert spec.ratings is None
    assert spec.region is None


def test_filter_rejects_inverted_date_range():
    with pytest.raises(ValidationError):
        FilterSpec(
            start_date=datetime(2024, 2, 1, tzinfo=timezone.utc),
            end_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )


def test_filter_matches(make_review):
    review = make_review(rating=4, region="us")

    assert FilterSpec(ratings={4, 5}, region="us").matches(review)
    assert not FilterSpec(ratings={1}).matches(review)
    assert not FilterSpec(store=Store.IOS).matches(review)


def test_ingest_request_normalizes_optional_fields():
    request = IngestRequest.model_validate({"appId": " com.example.app ", "store": "android", "appName": "", "region": "RU"})

    assert request.app_id == "com.example.app"
    assert request.app_name is None
    assert request.region == "ru"
