"""
Query filter value object passed into the storage engine.
"""
from typing import FrozenSet, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from review_collector.schemas.review import Store, as_utc


class FilterSpec(BaseModel):
    """
    Review query filter.

    Built once at the boundary and passed by value: every field is optional
    except pagination, and an unset field means "no constraint".
    `limit=None` returns every matching record.
    """

    app_id: Optional[str] = Field(None, alias="appId")
    store: Optional[Store] = None
    ratings: Optional[FrozenSet[int]] = None
    region: Optional[str] = None
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    limit: Optional[int] = Field(None, ge=1)
    offset: int = Field(0, ge=0)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("ratings")
    @classmethod
    def validate_ratings(cls, v: Optional[FrozenSet[int]]) -> Optional[FrozenSet[int]]:
        """Ratings must be within 1..5; an empty set means no rating filter."""
        if v is None:
            return None
        invalid = sorted(r for r in v if r < 1 or r > 5)
        if invalid:
            raise ValueError(f"ratings must be between 1 and 5, got {invalid}")
        return v or None

    @field_validator("region")
    @classmethod
    def normalize_region(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip().lower() or None

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_date_range(self) -> "FilterSpec":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("startDate must not be later than endDate")
        return self

    def matches(self, review) -> bool:
        """Apply the non-pagination filters to a single review."""
        if self.app_id is not None and review.app_id != self.app_id:
            return False
        if self.store is not None and review.store != self.store:
            return False
        if self.region is not None and review.region != self.region:
            return False
        if self.ratings is not None and review.rating not in self.ratings:
            return False
        if self.start_date is not None and review.date < self.start_date:
            return False
        if self.end_date is not None and review.date > self.end_date:
            return False
        return True
