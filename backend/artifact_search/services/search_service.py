"""
Search Service Module

Public catalogue search over artifact documents, filtered by the review
workflow held in a separate relational store.

Operations:
- structured_search(filters, sort, page) -> SearchResultPage
- global_search(text, sort, page) -> SearchResultPage
- get_artifact(artifact_id) -> ArtifactResult
- field_suggestions(field) -> List[str]

The two stores share no transaction or join. The review store is consulted
on every call as a read-side index, and the two reads are joined here by
id-set negation.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from artifact_search.core.exceptions import ArtifactNotFoundException
from artifact_search.repositories.artifact_store import ArtifactStore
from artifact_search.repositories.review_store import ReviewStatusStore
from artifact_search.schemas.artifact import Artifact, ArtifactResult, RatingSummary
from artifact_search.schemas.search import (
    PageRequest, SearchFilters, SearchPage, SearchResultPage, SortMode
)
from artifact_search.search.exclusion import ExclusionSetResolver
from artifact_search.search.predicates import (
    Equals, Predicate, ID_FIELD, build_filter_predicate, build_keyword_predicate, conjoin, has_text
)
from artifact_search.search.ranking import ResultRankerPaginator
from artifact_search.search.ratings import RatingAggregator

logger = logging.getLogger(__name__)

SUGGESTION_FIELDS = ("category", "period", "culture", "department")


class SearchService:
    """
    Service class for catalogue search operations.

    Stateless between calls; safe to share across concurrent requests.
    """

    def __init__(
        self,
        artifact_store: ArtifactStore,
        review_store: ReviewStatusStore,
        km_per_degree: float = 111.0,
        include_ratings: bool = True
    ):
        """
        Initialize SearchService with its two stores.

        Args:
            artifact_store: Document store holding artifact content
            review_store: Relational store holding review status and ratings
            km_per_degree: Radius conversion used by proximity search
            include_ratings: Attach rating aggregates to returned artifacts
        """
        self.artifact_store = artifact_store
        self.review_store = review_store
        self.km_per_degree = km_per_degree
        self.include_ratings = include_ratings
        self.exclusions = ExclusionSetResolver(review_store)
        self.ranker = ResultRankerPaginator(artifact_store, RatingAggregator(review_store))

    async def structured_search(
        self,
        filters: SearchFilters,
        sort: SortMode,
        page: PageRequest
    ) -> SearchResultPage:
        """
        Multi-field search with optional keyword, date range and proximity.

        Args:
            filters: Structured filter values; absent values add no constraint
            sort: Result ordering
            page: Coerced page request

        Returns:
            One page of visible artifacts and the total number of matches
        """
        predicate = build_filter_predicate(filters, self.km_per_degree)
        result = await self._search(predicate, sort, page)
        logger.info(
            f"Structured search ({sort.value}) matched {result.total} artifacts, "
            f"returning page {page.page} with {len(result.items)} items"
        )
        return await self._to_result_page(result)

    async def global_search(
        self,
        text: Optional[str],
        sort: SortMode,
        page: PageRequest
    ) -> SearchResultPage:
        """
        Keyword search across the descriptive fields and tags.

        Blank text returns every visible artifact.
        """
        predicate = build_keyword_predicate(text)
        result = await self._search(predicate, sort, page)
        logger.info(
            f"Global search for {text!r} ({sort.value}) matched {result.total} artifacts, "
            f"returning page {page.page} with {len(result.items)} items"
        )
        return await self._to_result_page(result)

    async def get_artifact(self, artifact_id: str) -> ArtifactResult:
        """
        Fetch one publicly visible artifact.

        Raises:
            ArtifactNotFoundException: If the id is unknown or the artifact is hidden
        """
        exclusion = await self.exclusions.resolve()
        artifact = await self.artifact_store.get(conjoin(Equals(ID_FIELD, artifact_id), exclusion))
        if artifact is None:
            raise ArtifactNotFoundException(artifact_id)
        results = await self._to_results([artifact])
        return results[0]

    async def field_suggestions(self, field: str) -> List[str]:
        """Sorted distinct non-blank values of a field over visible artifacts"""
        if field not in SUGGESTION_FIELDS:
            raise ValueError(f"Suggestions are not available for field '{field}'")

        exclusion = await self.exclusions.resolve()
        values = await self.artifact_store.distinct(field, conjoin(exclusion))
        return sorted({v.strip() for v in values if isinstance(v, str) and has_text(v)})

    async def _search(self, predicate: Predicate, sort: SortMode, page: PageRequest) -> SearchPage:
        if sort.store_orderable:
            exclusion = await self.exclusions.resolve()
            return await self.ranker.store_page(conjoin(predicate, exclusion), page)

        # Full fetch: the exclusion read and the artifact read are independent
        excluded, matches = await asyncio.gather(
            self.exclusions.excluded_ids(),
            self.artifact_store.find(predicate)
        )
        visible = [a for a in matches if a.id not in excluded]
        return await self.ranker.memory_page(visible, sort, page)

    async def _to_result_page(self, result: SearchPage) -> SearchResultPage:
        return SearchResultPage(
            items=await self._to_results(result.items),
            total=result.total,
            page=result.page,
            size=result.size
        )

    async def _to_results(self, artifacts: Sequence[Artifact]) -> List[ArtifactResult]:
        summaries: Dict[str, RatingSummary] = {}
        if self.include_ratings and artifacts:
            summaries = await self.review_store.rating_summaries(a.id for a in artifacts)

        results = []
        for artifact in artifacts:
            summary = summaries.get(artifact.id)
            results.append(
                ArtifactResult.from_artifact(
                    artifact,
                    average_rating=summary.average_rating if summary else 0.0,
                    total_ratings=summary.total_ratings if summary else 0
                )
            )
        return results
