"""
Canonical review and app search schemas shared by adapters, storage and export.
"""
from enum import Enum
from typing import Optional, Tuple
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator, ConfigDict


class Store(str, Enum):
    """Review source."""

    ANDROID = "android"
    IOS = "ios"


ReviewKey = Tuple[str, str, str]


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Review(BaseModel):
    """
    Canonical review record.

    Unique per (id, store, region): a store may reuse the same id in
    different regional feeds, and those are kept as separate records.
    Instances are frozen; a changed review replaces the stored one by key.
    """

    id: str = Field(..., min_length=1, description="Source-native review ID")
    store: Store
    region: str = Field(..., min_length=1, description="Country code the review was fetched from")
    app_id: str = Field(..., alias="appId", min_length=1, description="Source-native app ID")
    app_name: str = Field(..., alias="appName", description="App display name")
    rating: int = Field(..., ge=1, le=5)
    title: str = ""
    content: str = Field(..., min_length=1)
    author: str = ""
    date: datetime
    version: Optional[str] = None
    helpful: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    @field_validator("region")
    @classmethod
    def normalize_region(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be blank")
        return v

    @field_validator("date")
    @classmethod
    def date_to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def key(self) -> ReviewKey:
        """Storage key: (id, store, region)."""
        return (self.id, self.store.value, self.region)


class AppSearchResult(BaseModel):
    """App found by a store search. Not a review; only cached in the apps catalog."""

    id: str
    name: str
    developer: str = ""
    icon: Optional[str] = None
    store: Store

    model_config = ConfigDict(frozen=True)
