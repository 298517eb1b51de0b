"""
Artifact Catalogue Search - Test Configuration & Fixtures
=========================================================

Shared fixtures
- Review-status database on a temporary SQLite file (aiosqlite)
- Artifact collection on mongomock
- Store, service and HTTP client fixtures
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import mongomock
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from artifact_search.db.session import Base
from artifact_search.models.models import ReviewRecord, Rating, ReviewStatus
from artifact_search.repositories.artifact_store import ArtifactStore
from artifact_search.repositories.review_store import ReviewStatusStore
from artifact_search.services.search_service import SearchService


# ==================== Review-status database ====================

@pytest.fixture
async def review_engine(tmp_path):
    """Engine over a throwaway SQLite file"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'reviews.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(review_engine):
    return async_sessionmaker(review_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def review_store(session_factory) -> ReviewStatusStore:
    return ReviewStatusStore(session_factory)


class ReviewSeeder:
    """Writes review records and ratings; each record is saved one minute after the previous"""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._clock = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    async def review(
        self,
        artifact_id: str,
        status: ReviewStatus,
        ratings: Iterable[int] = (),
        saved_at: Optional[datetime] = None
    ) -> int:
        if saved_at is None:
            self._clock += timedelta(minutes=1)
            saved_at = self._clock

        async with self.session_factory() as session:
            record = ReviewRecord(
                artifact_id=artifact_id,
                user_id=1,
                status=status.value,
                saved_at=saved_at
            )
            session.add(record)
            await session.flush()
            for visitor, value in enumerate(ratings, start=100):
                session.add(Rating(user_id=visitor, review_id=record.id, rating_value=value))
            await session.commit()
            return record.id


@pytest.fixture
def reviews(session_factory) -> ReviewSeeder:
    return ReviewSeeder(session_factory)


# ==================== Artifact store ====================

def make_artifact(artifact_id: str, **fields) -> dict:
    """Artifact document with the given fields; anything omitted is absent"""
    document = {"_id": artifact_id}
    document.update(fields)
    return document


@pytest.fixture
def artifact_collection():
    client = mongomock.MongoClient()
    return client["catalogue"]["artifacts"]


@pytest.fixture
def artifact_store(artifact_collection) -> ArtifactStore:
    return ArtifactStore(artifact_collection)


@pytest.fixture
def search_service(artifact_store, review_store) -> SearchService:
    return SearchService(artifact_store, review_store)


# ==================== HTTP client ====================

@pytest.fixture
async def client(artifact_store, review_store):
    """API client with both stores replaced by the test stores"""
    from artifact_search.main import app
    from artifact_search.core.dependencies import get_artifact_store, get_review_status_store

    app.dependency_overrides[get_artifact_store] = lambda: artifact_store
    app.dependency_overrides[get_review_status_store] = lambda: review_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
