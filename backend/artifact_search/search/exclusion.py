"""
Exclusion of unreviewed artifacts from public search.
"""

import logging
from typing import Optional, Set

from artifact_search.repositories.review_store import ReviewStatusStore
from .predicates import NotIn, ID_FIELD

logger = logging.getLogger(__name__)


class ExclusionSetResolver:
    """
    Turns the review-status store's hidden ids into a negation predicate.

    Read fresh on every call. Store failures propagate; an unreachable store
    never degrades to excluding nothing.
    """

    def __init__(self, review_store: ReviewStatusStore):
        self.review_store = review_store

    async def excluded_ids(self) -> Set[str]:
        excluded = await self.review_store.excluded_artifact_ids()
        logger.info(f"Excluding {len(excluded)} pending/rejected artifacts from search")
        if excluded:
            logger.debug(f"Excluded artifact ids: {sorted(excluded)}")
        return excluded

    async def resolve(self) -> Optional[NotIn]:
        """NotIn predicate over the excluded ids, or None when nothing is hidden"""
        excluded = await self.excluded_ids()
        if not excluded:
            return None
        return NotIn(ID_FIELD, frozenset(excluded))
