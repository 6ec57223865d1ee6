"""
Durable review storage on async SQLAlchemy.
"""
from typing import Iterable, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from review_collector.core.exceptions import StorageUnavailableException
from review_collector.core.logging import logger
from review_collector.db.database import create_engine, create_session_factory, init_db, close_db
from review_collector.models import AppRecord, ReviewRecord
from review_collector.schemas.filters import FilterSpec
from review_collector.schemas.review import AppSearchResult, Review, Store
from review_collector.storage.base import QueryResult, ReviewStorage


class SQLReviewStorage(ReviewStorage):
    """
    Review store backed by a relational database.

    Each upsert() runs in a single transaction: either every review in the
    call is written or none is.
    """

    backend_name = "sql"

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._closed = False

    @classmethod
    async def create(cls, database_url: str) -> "SQLReviewStorage":
        """
        Build the engine and create tables.

        Raises whatever the driver raises if the database is unreachable;
        the caller decides whether to fall back.
        """
        engine = create_engine(database_url)
        try:
            await init_db(engine)
        except Exception:
            await close_db(engine)
            raise
        return cls(engine)

    async def upsert(self, reviews: Iterable[Review]) -> None:
        records = [ReviewRecord.from_review(review) for review in reviews]
        if not records:
            return

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for record in records:
                        # merge() updates the row if the composite key already exists
                        await session.merge(record)
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to upsert reviews: {str(e)}",
                extra={"count": len(records)},
                exc_info=True,
            )
            raise StorageUnavailableException(f"Database operation failed: {str(e)}") from e

        logger.debug("Reviews upserted into database", extra={"written": len(records)})

    async def query(self, filters: FilterSpec) -> QueryResult:
        conditions = []
        if filters.app_id is not None:
            conditions.append(ReviewRecord.app_id == filters.app_id)
        if filters.store is not None:
            conditions.append(ReviewRecord.store == filters.store.value)
        if filters.region is not None:
            conditions.append(ReviewRecord.region == filters.region)
        if filters.ratings is not None:
            conditions.append(ReviewRecord.rating.in_(sorted(filters.ratings)))
        if filters.start_date is not None:
            conditions.append(ReviewRecord.date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(ReviewRecord.date <= filters.end_date)

        count_stmt = select(func.count()).select_from(ReviewRecord)
        stmt = select(ReviewRecord)
        if conditions:
            count_stmt = count_stmt.where(and_(*conditions))
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(
            ReviewRecord.date.desc(),
            ReviewRecord.store.desc(),
            ReviewRecord.region.desc(),
            ReviewRecord.review_id.desc(),
        ).offset(filters.offset)
        if filters.limit is not None:
            stmt = stmt.limit(filters.limit)

        try:
            async with self._session_factory() as session:
                total = (await session.execute(count_stmt)).scalar_one()
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to query reviews: {str(e)}", exc_info=True)
            raise StorageUnavailableException(f"Database operation failed: {str(e)}") from e

        return QueryResult(reviews=[row.to_review() for row in rows], total=total)

    async def count(self) -> int:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(func.count()).select_from(ReviewRecord))
                return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to count reviews: {str(e)}", exc_info=True)
            raise StorageUnavailableException(f"Database operation failed: {str(e)}") from e

    async def upsert_apps(self, apps: Iterable[AppSearchResult]) -> None:
        records = [AppRecord.from_result(app) for app in apps]
        if not records:
            return

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for record in records:
                        await session.merge(record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to cache apps: {str(e)}", exc_info=True)
            raise StorageUnavailableException(f"Database operation failed: {str(e)}") from e

    async def get_app(self, app_id: str, store: Store) -> Optional[AppSearchResult]:
        try:
            async with self._session_factory() as session:
                record = await session.get(AppRecord, (app_id, store.value))
                return record.to_result() if record else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read app catalog: {str(e)}", exc_info=True, extra={"app_id": app_id})
            raise StorageUnavailableException(f"Database operation failed: {str(e)}") from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await close_db(self._engine)
