"""
Review-Status Store

Read access to the relational review workflow: which artifacts are hidden
from the public catalogue, and how visitors rated them.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Set

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from artifact_search.core.exceptions import StoreUnavailableException
from artifact_search.models.models import ReviewRecord, Rating, HIDDEN_STATUSES
from artifact_search.schemas.artifact import RatingSummary

logger = logging.getLogger(__name__)


class ReviewStatusStore:
    """
    SQLAlchemy-backed reader for review records and ratings.

    Every call opens its own session from the factory, so calls may run
    concurrently. Driver and connection failures surface as
    StoreUnavailableException.
    """

    STORE_NAME = "review_status_store"

    def __init__(self, session_factory: async_sessionmaker, chunk_size: int = 500):
        """
        Args:
            session_factory: Factory producing AsyncSession objects
            chunk_size: Maximum number of ids bound into one IN clause
        """
        self.session_factory = session_factory
        self.chunk_size = chunk_size

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Review-status store failed during {operation}: {e}")
            raise StoreUnavailableException(
                message=f"Review-status store unavailable during {operation}",
                store=self.STORE_NAME,
                operation=operation
            ) from e

    async def excluded_artifact_ids(self) -> Set[str]:
        """
        Ids whose most recent review record is pending or rejected.

        The latest record is the one with the greatest saved_at, ties going
        to the highest row id. Artifacts without any record are not returned.
        """
        latest = (
            select(
                ReviewRecord.artifact_id.label("artifact_id"),
                ReviewRecord.status.label("status"),
                func.row_number().over(
                    partition_by=ReviewRecord.artifact_id,
                    order_by=(ReviewRecord.saved_at.desc(), ReviewRecord.id.desc())
                ).label("recency")
            )
            .subquery()
        )
        query = (
            select(latest.c.artifact_id)
            .where(latest.c.recency == 1)
            .where(latest.c.status.in_(HIDDEN_STATUSES))
        )

        async with self._session("excluded_artifact_ids") as session:
            result = await session.execute(query)
            return {row[0] for row in result.fetchall()}

    async def rating_summaries(self, artifact_ids: Iterable[str]) -> Dict[str, RatingSummary]:
        """
        Average rating and rating count per artifact id.

        Every requested id is present in the result; unrated artifacts get
        0.0 and 0.
        """
        ids = list(dict.fromkeys(artifact_ids))
        summaries = {artifact_id: RatingSummary(artifact_id=artifact_id) for artifact_id in ids}
        if not ids:
            return summaries

        async with self._session("rating_summaries") as session:
            for chunk in _chunks(ids, self.chunk_size):
                query = (
                    select(
                        ReviewRecord.artifact_id,
                        func.avg(Rating.rating_value),
                        func.count(Rating.id)
                    )
                    .join(Rating, Rating.review_id == ReviewRecord.id)
                    .where(ReviewRecord.artifact_id.in_(chunk))
                    .group_by(ReviewRecord.artifact_id)
                )
                result = await session.execute(query)
                for artifact_id, average, count in result.fetchall():
                    summaries[artifact_id] = RatingSummary(
                        artifact_id=artifact_id,
                        average_rating=float(average) if average is not None else 0.0,
                        total_ratings=int(count or 0)
                    )

        return summaries

    async def ping(self) -> None:
        """Round-trip to the database; raises StoreUnavailableException on failure"""
        async with self._session("ping") as session:
            await session.execute(select(1))


def _chunks(items: List[str], size: int) -> Iterable[List[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]
