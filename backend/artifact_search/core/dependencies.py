"""
Dependency injection for the catalogue search API
Builds store adapters and the search service per request
"""

from fastapi import Depends

from artifact_search.core.config import settings
from artifact_search.db.mongo import get_artifact_collection
from artifact_search.db.session import AsyncSessionLocal
from artifact_search.repositories.artifact_store import ArtifactStore
from artifact_search.repositories.review_store import ReviewStatusStore
from artifact_search.services.search_service import SearchService


def get_artifact_store() -> ArtifactStore:
    """Artifact store over the configured MongoDB collection"""
    return ArtifactStore(get_artifact_collection())


def get_review_status_store() -> ReviewStatusStore:
    """Review-status store over the shared SQLAlchemy session factory"""
    return ReviewStatusStore(AsyncSessionLocal, chunk_size=settings.RATING_QUERY_CHUNK_SIZE)


def get_search_service(
    artifact_store: ArtifactStore = Depends(get_artifact_store),
    review_store: ReviewStatusStore = Depends(get_review_status_store)
) -> SearchService:
    """
    Factory function to create SearchService instance.

    Usage with FastAPI:
        @router.get("/artifacts")
        async def search(service: SearchService = Depends(get_search_service)):
            ...
    """
    return SearchService(
        artifact_store,
        review_store,
        km_per_degree=settings.GEO_KM_PER_DEGREE,
        include_ratings=settings.SEARCH_INCLUDE_RATINGS
    )
