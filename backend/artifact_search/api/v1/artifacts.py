"""
Artifact catalogue search API endpoints
Structured search, keyword search, artifact detail and field suggestions
"""

from enum import Enum
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query, Response

from artifact_search.core.config import settings
from artifact_search.core.dependencies import get_search_service
from artifact_search.schemas.artifact import ArtifactResult
from artifact_search.schemas.search import (
    GeoQuery, PageRequest, SearchFilters, SearchResultPage, SortMode,
    parse_optional_date, parse_optional_float
)
from artifact_search.services.search_service import SearchService

logger = logging.getLogger(__name__)
router = APIRouter()

TOTAL_COUNT_HEADER = "X-Total-Count"


class SuggestionField(str, Enum):
    """Fields offering autocomplete suggestions"""
    CATEGORIES = "categories"
    PERIODS = "periods"
    CULTURES = "cultures"
    DEPARTMENTS = "departments"

    @property
    def document_field(self) -> str:
        return self.value[:-1]


def _page_request(page: Optional[int], size: Optional[int]) -> PageRequest:
    return PageRequest.of(page, size, settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)


def _paged_response(response: Response, result: SearchResultPage) -> List[ArtifactResult]:
    response.headers[TOTAL_COUNT_HEADER] = str(result.total)
    return result.items


@router.get("/search", response_model=List[ArtifactResult])
async def search_artifacts(
    response: Response,
    any_field: Optional[str] = Query(default=None, alias="anyField"),
    title: Optional[str] = None,
    category: Optional[str] = None,
    culture: Optional[str] = None,
    department: Optional[str] = None,
    period: Optional[str] = None,
    medium: Optional[str] = None,
    artist_name: Optional[str] = Query(default=None, alias="artistName"),
    tags: Optional[str] = None,
    from_date: Optional[str] = Query(default=None, alias="fromDate", description="ISO date, inclusive"),
    to_date: Optional[str] = Query(default=None, alias="toDate", description="ISO date, inclusive"),
    location_query: Optional[str] = Query(default=None, alias="locationQuery"),
    latitude: Optional[str] = None,
    longitude: Optional[str] = None,
    radius: Optional[str] = Query(default=None, description="Search radius in kilometres"),
    city: Optional[str] = None,
    country: Optional[str] = None,
    sort: Optional[str] = Query(default=None, description="best_match, ascending, descending, most_few, least_few"),
    page: Optional[int] = Query(default=0),
    size: Optional[int] = Query(default=None),
    service: SearchService = Depends(get_search_service)
):
    """Structured multi-field search; the total match count is returned in X-Total-Count"""
    filters = SearchFilters(
        any_field=any_field,
        title=title,
        category=category,
        culture=culture,
        department=department,
        period=period,
        medium=medium,
        artist_name=artist_name,
        tags=tags,
        from_date=parse_optional_date(from_date, "fromDate"),
        to_date=parse_optional_date(to_date, "toDate"),
        location_query=location_query,
        city=city,
        country=country,
        geo=GeoQuery(
            latitude=parse_optional_float(latitude, "latitude"),
            longitude=parse_optional_float(longitude, "longitude"),
            radius_km=parse_optional_float(radius, "radius")
        )
    )
    result = await service.structured_search(filters, SortMode.parse(sort), _page_request(page, size))
    return _paged_response(response, result)


@router.get("", response_model=List[ArtifactResult])
async def global_search_artifacts(
    response: Response,
    search: Optional[str] = Query(default=None, description="Free text matched against descriptive fields and tags"),
    sort: Optional[str] = Query(default=None),
    page: Optional[int] = Query(default=0),
    size: Optional[int] = Query(default=None),
    service: SearchService = Depends(get_search_service)
):
    """Keyword search across the catalogue; the total match count is returned in X-Total-Count"""
    result = await service.global_search(search, SortMode.parse(sort), _page_request(page, size))
    return _paged_response(response, result)


@router.get("/suggestions/{field}", response_model=List[str])
async def get_suggestions(
    field: SuggestionField,
    service: SearchService = Depends(get_search_service)
):
    """Distinct values for search-form autocomplete"""
    return await service.field_suggestions(field.document_field)


@router.get("/{artifact_id}", response_model=ArtifactResult)
async def get_artifact(
    artifact_id: str,
    service: SearchService = Depends(get_search_service)
):
    """Get one publicly visible artifact by id"""
    return await service.get_artifact(artifact_id)
