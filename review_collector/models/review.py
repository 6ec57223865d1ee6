"""
Review table - stores canonical reviews keyed by (review_id, store, region).
"""
from datetime import datetime, timezone
from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    DateTime,
    Index,
)

from review_collector.db.database import Base
from review_collector.schemas.review import Review, Store, as_utc


class ReviewRecord(Base):
    """
    Canonical review table.
    A store may reuse review IDs across regional feeds, so the region is part of the key.
    """

    __tablename__ = "reviews"

    # Composite Primary Key
    review_id = Column(String, primary_key=True)
    store = Column(String(16), primary_key=True)
    region = Column(String(16), primary_key=True)

    # App identity
    app_id = Column(String, nullable=False)
    app_name = Column(String, nullable=False)

    # Review Content
    rating = Column(Integer, nullable=False)
    title = Column(Text, nullable=False, default="")
    content = Column(Text, nullable=False)
    author = Column(String, nullable=False, default="")
    version = Column(String, nullable=True)
    helpful = Column(Integer, nullable=True)

    # Timestamps
    date = Column(DateTime(timezone=True), nullable=False)  # Source-reported review time
    ingested_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    __table_args__ = (
        Index("idx_reviews_app_id", "app_id"),
        Index("idx_reviews_store", "store"),
        Index("idx_reviews_region", "region"),
        Index("idx_reviews_rating", "rating"),
        Index("idx_reviews_date", "date"),
    )

    @classmethod
    def from_review(cls, review: Review) -> "ReviewRecord":
        return cls(
            review_id=review.id,
            store=review.store.value,
            region=review.region,
            app_id=review.app_id,
            app_name=review.app_name,
            rating=review.rating,
            title=review.title,
            content=review.content,
            author=review.author,
            version=review.version,
            helpful=review.helpful,
            date=review.date,
        )

    def to_review(self) -> Review:
        # SQLite hands back naive datetimes; values are always written in UTC
        return Review(
            id=self.review_id,
            store=Store(self.store),
            region=self.region,
            app_id=self.app_id,
            app_name=self.app_name,
            rating=self.rating,
            title=self.title or "",
            content=self.content,
            author=self.author or "",
            date=as_utc(self.date),
            version=self.version,
            helpful=self.helpful,
        )

    def __repr__(self):
        return f"<ReviewRecord(review_id={self.review_id}, store={self.store}, region={self.region})>"
