"""
Tests for the CSV/JSON export serializer.
"""
import json
from datetime import datetime, timezone

import pytest

from review_collector.core.exceptions import InvalidArgumentException
from review_collector.schemas.requests import ExportFormat
from review_collector.schemas.review import Review, Store
from review_collector.services.export_service import (
    CSV_HEADER,
    ExportSerializer,
    export_filename,
    neutralize,
    quote_cell,
)


@pytest.fixture
def serializer():
    return ExportSerializer()


def csv_lines(result):
    text = result.content.decode("utf-8")
    assert text.startswith("\ufeff")
    return text[1:].split("\n")


def test_csv_header_and_rows(serializer, make_review):
    reviews = [
        make_review("r1", title="Great", minutes=0),
        make_review("r2", store=Store.IOS, app_id="123", minutes=61, version=None, helpful=None),
    ]

    result = serializer.render(reviews, ExportFormat.CSV, app_name="Example")
    lines = csv_lines(result)

    assert result.content_type == "text/csv; charset=utf-8"
    assert lines[0] == ";".join(CSV_HEADER)
    assert lines[1] == "r1;Example;Google Play;5;Great;Works well;Alice;2024-01-01 00:00:00;us;1.0;0"
    assert lines[2] == "r2;Example;App Store;5;;Works well;Alice;2024-01-01 01:01:00;us;;"
    assert lines[3] == ""
    assert len(lines) == 4


@pytest.mark.parametrize("field", ["title", "content", "author", "app_name", "version"])
@pytest.mark.parametrize("payload", ["=HYPERLINK(\"x\")", "+1+1", "-2", "@SUM(A1)", "\tcmd"])
def test_formula_injection_neutralized_in_every_text_field(serializer, make_review, field, payload):
    review = make_review("r1", **{field: payload})

    text = serializer.render([review], ExportFormat.CSV).content.decode("utf-8")

    assert ";" + payload not in text
    assert "'" + payload.replace('"', '""') in text


def test_neutralize():
    assert neutralize("=1+1") == "'=1+1"
    assert neutralize("\rx") == "'\rx"
    assert neutralize("plain") == "plain"
    assert neutralize("") == ""
    assert neutralize("a=b") == "a=b"


def test_quote_cell():
    assert quote_cell("a;b") == '"a;b"'
    assert quote_cell('say "hi"') == '"say ""hi"""'
    assert quote_cell("line\nbreak") == '"line\nbreak"'
    assert quote_cell("cr\rhere") == '"cr\rhere"'
    assert quote_cell("plain") == "plain"


def test_multiline_content_stays_one_record(serializer, make_review):
    review = make_review("r1", content='First line; "quoted"\nsecond line')

    text = serializer.render([review], ExportFormat.CSV).content.decode("utf-8")

    assert '"First line; ""quoted""\nsecond line"' in text


def test_json_envelope_round_trip(serializer, make_review):
    reviews = [make_review("r1", title="T", minutes=5), make_review("r2", store=Store.IOS, helpful=None)]

    result = serializer.render(reviews, "json")
    payload = json.loads(result.content.decode("utf-8"))

    assert result.content_type == "application/json; charset=utf-8"
    assert payload["totalReviews"] == 2
    assert datetime.fromisoformat(payload["exportDate"]).tzinfo is not None
    assert payload["reviews"][0]["appId"] == "com.example.app"
    assert payload["reviews"][0]["appName"] == "Example"
    assert [Review.model_validate(item) for item in payload["reviews"]] == reviews


def test_json_keeps_non_ascii_text(serializer, make_review):
    review = make_review("r1", content="Отличное приложение")

    content = serializer.render([review], ExportFormat.JSON).content

    assert "Отличное приложение".encode("utf-8") in content


def test_unknown_format_rejected(serializer, make_review):
    with pytest.raises(InvalidArgumentException):
        serializer.render([make_review()], "xlsx")


def test_filename():
    now = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=timezone.utc)

    assert export_filename("Example", ExportFormat.CSV, now) == "reviews_Example_2024-03-05T14-07-09.csv"
    assert export_filename(None, ExportFormat.JSON, now) == "reviews_all_2024-03-05T14-07-09.json"


def test_render_filename_uses_app_name(serializer, make_review):
    result = serializer.render([make_review()], ExportFormat.CSV, app_name="Example")

    assert result.filename.startswith("reviews_Example_")
    assert result.filename.endswith(".csv")
