"""
Average visitor ratings used as the ranking key of rating sorts.
"""

from typing import Dict, Iterable

from artifact_search.repositories.review_store import ReviewStatusStore


class RatingAggregator:
    """Average visitor rating per artifact, used as a ranking key"""

    def __init__(self, review_store: ReviewStatusStore):
        self.review_store = review_store

    async def average_ratings(self, artifact_ids: Iterable[str]) -> Dict[str, float]:
        """Map of id to average rating; unrated ids map to 0.0"""
        summaries = await self.review_store.rating_summaries(artifact_ids)
        return {artifact_id: summary.average_rating for artifact_id, summary in summaries.items()}
