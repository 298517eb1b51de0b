"""
Unit Tests: Review-Status Store
===============================

Tests covering:
1. Most-recent-status exclusion
2. Rating aggregation
3. Exclusion predicate resolution
4. Failure translation
"""

import pytest
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from artifact_search.core.exceptions import StoreUnavailableException
from artifact_search.models.models import ReviewStatus
from artifact_search.repositories.review_store import ReviewStatusStore
from artifact_search.search.exclusion import ExclusionSetResolver
from artifact_search.search.predicates import NotIn
from artifact_search.search.ratings import RatingAggregator


class TestExcludedArtifactIds:

    @pytest.mark.asyncio
    async def test_empty_store_excludes_nothing(self, review_store):
        assert await review_store.excluded_artifact_ids() == set()

    @pytest.mark.asyncio
    async def test_pending_and_rejected_are_excluded(self, review_store, reviews):
        await reviews.review("pending", ReviewStatus.PENDING)
        await reviews.review("rejected", ReviewStatus.REJECTED)
        await reviews.review("accepted", ReviewStatus.ACCEPTED)

        assert await review_store.excluded_artifact_ids() == {"pending", "rejected"}

    @pytest.mark.asyncio
    async def test_most_recent_record_decides(self, review_store, reviews):
        # resubmitted and accepted
        await reviews.review("a1", ReviewStatus.REJECTED)
        await reviews.review("a1", ReviewStatus.ACCEPTED)
        # accepted, then edited and back under review
        await reviews.review("a2", ReviewStatus.ACCEPTED)
        await reviews.review("a2", ReviewStatus.PENDING)

        assert await review_store.excluded_artifact_ids() == {"a2"}

    @pytest.mark.asyncio
    async def test_recency_uses_saved_at_not_insert_order(self, review_store, reviews):
        await reviews.review("a1", ReviewStatus.ACCEPTED, saved_at=datetime(2024, 5, 1, tzinfo=timezone.utc))
        await reviews.review("a1", ReviewStatus.PENDING, saved_at=datetime(2024, 4, 1, tzinfo=timezone.utc))

        assert await review_store.excluded_artifact_ids() == set()

    @pytest.mark.asyncio
    async def test_same_timestamp_latest_row_wins(self, review_store, reviews):
        saved_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
        await reviews.review("a1", ReviewStatus.ACCEPTED, saved_at=saved_at)
        await reviews.review("a1", ReviewStatus.REJECTED, saved_at=saved_at)

        assert await review_store.excluded_artifact_ids() == {"a1"}


class TestRatingSummaries:

    @pytest.mark.asyncio
    async def test_average_and_count(self, review_store, reviews):
        await reviews.review("a1", ReviewStatus.ACCEPTED, ratings=[5, 4])
        await reviews.review("a2", ReviewStatus.ACCEPTED, ratings=[2])

        summaries = await review_store.rating_summaries(["a1", "a2"])

        assert summaries["a1"].average_rating == pytest.approx(4.5)
        assert summaries["a1"].total_ratings == 2
        assert summaries["a2"].average_rating == pytest.approx(2.0)
        assert summaries["a2"].total_ratings == 1

    @pytest.mark.asyncio
    async def test_ratings_across_review_records_are_combined(self, review_store, reviews):
        await reviews.review("a1", ReviewStatus.ACCEPTED, ratings=[1])
        await reviews.review("a1", ReviewStatus.ACCEPTED, ratings=[5, 3])

        summary = (await review_store.rating_summaries(["a1"]))["a1"]

        assert summary.average_rating == pytest.approx(3.0)
        assert summary.total_ratings == 3

    @pytest.mark.asyncio
    async def test_unrated_ids_default_to_zero(self, review_store, reviews):
        await reviews.review("reviewed", ReviewStatus.ACCEPTED)

        summaries = await review_store.rating_summaries(["reviewed", "unknown"])

        assert set(summaries) == {"reviewed", "unknown"}
        assert summaries["unknown"].average_rating == 0.0
        assert summaries["unknown"].total_ratings == 0
        assert summaries["reviewed"].total_ratings == 0

    @pytest.mark.asyncio
    async def test_no_ids_no_query(self, review_store):
        assert await review_store.rating_summaries([]) == {}

    @pytest.mark.asyncio
    async def test_chunked_lookup_matches_single_query(self, session_factory, reviews):
        for index, value in enumerate([1, 2, 3, 4, 5]):
            await reviews.review(f"a{index}", ReviewStatus.ACCEPTED, ratings=[value])
        ids = [f"a{index}" for index in range(5)]

        chunked = await ReviewStatusStore(session_factory, chunk_size=2).rating_summaries(ids)

        assert {k: v.average_rating for k, v in chunked.items()} == {
            "a0": 1.0, "a1": 2.0, "a2": 3.0, "a3": 4.0, "a4": 5.0
        }

    @pytest.mark.asyncio
    async def test_aggregator_maps_ids_to_averages(self, review_store, reviews):
        await reviews.review("a1", ReviewStatus.ACCEPTED, ratings=[3, 4])

        averages = await RatingAggregator(review_store).average_ratings(["a1", "a2"])

        assert averages == {"a1": pytest.approx(3.5), "a2": 0.0}


class TestExclusionSetResolver:

    @pytest.mark.asyncio
    async def test_nothing_hidden_resolves_to_none(self, review_store, reviews):
        await reviews.review("a1", ReviewStatus.ACCEPTED)
        assert await ExclusionSetResolver(review_store).resolve() is None

    @pytest.mark.asyncio
    async def test_hidden_ids_become_not_in(self, review_store, reviews):
        await reviews.review("a1", ReviewStatus.PENDING)
        await reviews.review("a2", ReviewStatus.REJECTED)

        predicate = await ExclusionSetResolver(review_store).resolve()

        assert predicate == NotIn("_id", frozenset({"a1", "a2"}))


class TestStoreFailure:

    @pytest.fixture
    async def broken_store(self, tmp_path):
        # SQLite cannot create a database file inside a missing directory
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'reviews.db'}")
        yield ReviewStatusStore(async_sessionmaker(engine, class_=AsyncSession))
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_exclusion_read_failure_raises(self, broken_store):
        with pytest.raises(StoreUnavailableException) as exc_info:
            await broken_store.excluded_artifact_ids()

        assert exc_info.value.details.context == {
            "store": "review_status_store",
            "operation": "excluded_artifact_ids"
        }

    @pytest.mark.asyncio
    async def test_rating_read_failure_raises(self, broken_store):
        with pytest.raises(StoreUnavailableException):
            await broken_store.rating_summaries(["a1"])

    @pytest.mark.asyncio
    async def test_resolver_does_not_degrade(self, broken_store):
        with pytest.raises(StoreUnavailableException):
            await ExclusionSetResolver(broken_store).resolve()

    @pytest.mark.asyncio
    async def test_ping(self, review_store, broken_store):
        await review_store.ping()
        with pytest.raises(StoreUnavailableException):
            await broken_store.ping()
