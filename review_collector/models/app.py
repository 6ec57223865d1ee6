"""
Apps catalog table - caches store search results.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime

from review_collector.db.database import Base
from review_collector.schemas.review import AppSearchResult, Store


class AppRecord(Base):
    """Catalog cache of apps seen in store searches, keyed by (app_id, store)."""

    __tablename__ = "apps"

    app_id = Column(String, primary_key=True)
    store = Column(String(16), primary_key=True)
    name = Column(String, nullable=False)
    developer = Column(String, nullable=False, default="")
    icon = Column(String, nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @classmethod
    def from_result(cls, result: AppSearchResult) -> "AppRecord":
        return cls(
            app_id=result.id,
            store=result.store.value,
            name=result.name,
            developer=result.developer,
            icon=result.icon,
        )

    def to_result(self) -> AppSearchResult:
        return AppSearchResult(
            id=self.app_id,
            name=self.name,
            developer=self.developer or "",
            icon=self.icon,
            store=Store(self.store),
        )

    def __repr__(self):
        return f"<AppRecord(app_id={self.app_id}, store={self.store}, name={self.name})>"
