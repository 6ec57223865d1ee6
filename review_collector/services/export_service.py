"""
Export service.
Renders canonical reviews as a downloadable CSV or JSON file.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from review_collector.core.exceptions import InvalidArgumentException
from review_collector.core.logging import logger
from review_collector.schemas.requests import ExportFormat
from review_collector.schemas.review import Review, Store

CSV_HEADER = [
    "ID",
    "App Name",
    "Store",
    "Rating",
    "Title",
    "Content",
    "Author",
    "Date",
    "Region",
    "Version",
    "Helpful",
]
CSV_DELIMITER = ";"
CSV_LINE_TERMINATOR = "\n"
CSV_BOM = "\ufeff"

STORE_LABELS = {
    Store.ANDROID: "Google Play",
    Store.IOS: "App Store",
}

# Spreadsheet apps evaluate cells starting with these as formulas
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")

_QUOTE_TRIGGERS = (CSV_DELIMITER, '"', "\n", "\r")


@dataclass(frozen=True)
class ExportResult:
    """A rendered export file."""

    filename: str
    content_type: str
    content: bytes


def neutralize(value: str) -> str:
    """Prefix a cell that a spreadsheet would read as a formula with a single quote."""
    if value and value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def quote_cell(value: str) -> str:
    """Quote a cell containing the separator, a quote or a line break."""
    if any(ch in value for ch in _QUOTE_TRIGGERS):
        return '"' + value.replace('"', '""') + '"'
    return value


def export_filename(app_name: Optional[str], export_format: ExportFormat, now: Optional[datetime] = None) -> str:
    """reviews_<app name or "all">_<UTC timestamp>.<ext>"""
    now = now or datetime.now(timezone.utc)
    timestamp = now.astimezone(timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds").replace(":", "-")
    return f"reviews_{app_name or 'all'}_{timestamp}.{export_format.value}"


class ExportSerializer:
    """
    Serializes reviews for download.

    CSV is aimed at spreadsheet users: `;`-separated, UTF-8 with a BOM,
    and every text cell is neutralized against formula injection before
    quoting. JSON carries the canonical camelCase records unchanged.
    """

    def render(
        self,
        reviews: Sequence[Review],
        export_format: Union[ExportFormat, str],
        app_name: Optional[str] = None,
    ) -> ExportResult:
        """
        Render reviews in the requested format.

        Raises:
            InvalidArgumentException: If the format is not supported
        """
        try:
            export_format = ExportFormat(export_format)
        except ValueError:
            raise InvalidArgumentException(
                f"Unsupported export format: {export_format}",
                details={"allowed": [f.value for f in ExportFormat]},
            )

        filename = export_filename(app_name, export_format)

        if export_format == ExportFormat.JSON:
            content = self.to_json(reviews)
            content_type = "application/json; charset=utf-8"
        else:
            content = self.to_csv(reviews)
            content_type = "text/csv; charset=utf-8"

        logger.info(
            "Export rendered",
            extra={
                "export_format": export_format.value,
                "review_count": len(reviews),
                "bytes": len(content),
                "export_filename": filename,
            },
        )

        return ExportResult(filename=filename, content_type=content_type, content=content)

    def to_csv(self, reviews: Sequence[Review]) -> bytes:
        lines = [self._csv_line(CSV_HEADER)]
        for review in reviews:
            lines.append(self._csv_line(self._csv_row(review)))
        body = CSV_LINE_TERMINATOR.join(lines) + CSV_LINE_TERMINATOR
        return (CSV_BOM + body).encode("utf-8")

    def to_json(self, reviews: Sequence[Review]) -> bytes:
        payload = {
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "totalReviews": len(reviews),
            "reviews": [review.model_dump(mode="json", by_alias=True) for review in reviews],
        }
        return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")

    @staticmethod
    def _csv_row(review: Review) -> List[str]:
        return [
            review.id,
            review.app_name,
            STORE_LABELS[review.store],
            str(review.rating),
            review.title,
            review.content,
            review.author,
            review.date.strftime("%Y-%m-%d %H:%M:%S"),
            review.region,
            review.version or "",
            "" if review.helpful is None else str(review.helpful),
        ]

    @staticmethod
    def _csv_line(cells: List[str]) -> str:
        return CSV_DELIMITER.join(quote_cell(neutralize(cell)) for cell in cells)


export_serializer = ExportSerializer()
