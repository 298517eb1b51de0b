"""
Ranking and pagination of artifact search results.

Orderings the artifact store can produce itself are paginated by the store.
Every other ordering needs the full match set in memory: title orderings
because they are case-insensitive with blanks first, rating orderings because
the key lives in the review-status store.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from artifact_search.repositories.artifact_store import ArtifactStore, MAX_SKIP
from artifact_search.schemas.artifact import Artifact
from artifact_search.schemas.search import PageRequest, SearchPage, SortMode
from .predicates import Predicate
from .ratings import RatingAggregator

logger = logging.getLogger(__name__)


def title_key(artifact: Artifact) -> str:
    return (artifact.title or "").strip().lower()


def rank(
    artifacts: Sequence[Artifact],
    sort: SortMode,
    ratings: Optional[Dict[str, float]] = None
) -> List[Artifact]:
    """
    Order artifacts for the given sort mode.

    Sorting is stable, so equal keys keep the store's natural order.
    """
    if sort is SortMode.ASCENDING:
        return sorted(artifacts, key=title_key)
    if sort is SortMode.DESCENDING:
        return sorted(artifacts, key=title_key, reverse=True)
    if sort.requires_rating:
        ratings = ratings or {}
        sign = -1.0 if sort is SortMode.MOST_FAVOURITE else 1.0
        return sorted(artifacts, key=lambda a: sign * ratings.get(a.id, 0.0))
    return list(artifacts)


def paginate(items: Sequence[Artifact], page: PageRequest) -> Tuple[List[Artifact], int]:
    """Slice one page; a page past the end is empty but keeps the total"""
    total = len(items)
    start = page.offset
    if start >= total:
        return [], total
    end = min(start + page.size, total)
    return list(items[start:end]), total


class ResultRankerPaginator:
    """Produces (page items, total) through the cheapest path for a sort mode"""

    def __init__(self, artifact_store: ArtifactStore, rating_aggregator: RatingAggregator):
        self.artifact_store = artifact_store
        self.rating_aggregator = rating_aggregator

    async def store_page(self, predicate: Predicate, page: PageRequest) -> SearchPage:
        """Store-side skip/limit for the natural order; page and count run together"""
        if page.offset > MAX_SKIP:
            # no collection holds that many documents; only the total is needed
            total = await self.artifact_store.count(predicate)
            return SearchPage(items=[], total=total, page=page.page, size=page.size)

        items, total = await asyncio.gather(
            self.artifact_store.find(predicate, skip=page.offset, limit=page.size),
            self.artifact_store.count(predicate)
        )
        logger.debug(f"Store-paginated search returned {len(items)} of {total}")
        return SearchPage(items=items, total=total, page=page.page, size=page.size)

    async def memory_page(self, matches: Sequence[Artifact], sort: SortMode, page: PageRequest) -> SearchPage:
        """Rank the complete match set in memory, then slice"""
        ratings = None
        if sort.requires_rating and matches:
            ratings = await self.rating_aggregator.average_ratings(a.id for a in matches)

        items, total = paginate(rank(matches, sort, ratings), page)
        logger.debug(f"In-memory {sort.value} search returned {len(items)} of {total}")
        return SearchPage(items=items, total=total, page=page.page, size=page.size)
