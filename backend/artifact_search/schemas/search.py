"""
Search request/response schemas
Filter values, sort modes and page requests for catalogue search
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, List, Any
import logging
import math

from pydantic import BaseModel, Field

from .artifact import Artifact, ArtifactResult

logger = logging.getLogger(__name__)


class SortMode(str, Enum):
    """Result orderings offered by the catalogue"""
    BEST_MATCH = "best_match"
    ASCENDING = "ascending"
    DESCENDING = "descending"
    MOST_FAVOURITE = "most_few"
    LEAST_FAVOURITE = "least_few"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortMode":
        """Unknown or empty sort values fall back to the store's own order"""
        if value is None or not str(value).strip():
            return cls.BEST_MATCH
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown sort option '{value}', using default order")
            return cls.BEST_MATCH

    @property
    def requires_rating(self) -> bool:
        return self in (SortMode.MOST_FAVOURITE, SortMode.LEAST_FAVOURITE)

    @property
    def store_orderable(self) -> bool:
        """Whether the artifact store can paginate this ordering itself"""
        return self is SortMode.BEST_MATCH


@dataclass(frozen=True)
class GeoQuery:
    """Centre point and radius of a proximity search"""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_km: Optional[float] = None


@dataclass(frozen=True)
class SearchFilters:
    """Optional structured filters; None or blank means 'no constraint'"""
    any_field: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    culture: Optional[str] = None
    department: Optional[str] = None
    period: Optional[str] = None
    medium: Optional[str] = None
    artist_name: Optional[str] = None
    tags: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    location_query: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    geo: GeoQuery = field(default_factory=GeoQuery)


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page number and page size"""
    page: int
    size: int

    @property
    def offset(self) -> int:
        return self.page * self.size

    @classmethod
    def of(cls, page: Optional[int], size: Optional[int], default_size: int, max_size: int) -> "PageRequest":
        """Coerce untrusted paging input: size <= 0 -> default, page < 0 -> 0"""
        if size is None or size <= 0:
            size = default_size
        if size > max_size:
            logger.debug(f"Page size {size} capped at {max_size}")
            size = max_size
        if page is None or page < 0:
            page = 0
        return cls(page=page, size=size)


@dataclass
class SearchPage:
    """One page of ranked artifacts plus the total number of matches"""
    items: List[Artifact]
    total: int
    page: int
    size: int


class SearchResultPage(BaseModel):
    """Search page handed to the API layer"""
    items: List[ArtifactResult] = Field(default_factory=list)
    total: int = 0
    page: int = 0
    size: int = 0


# Lenient parsing of optional query parameters

def parse_optional_date(value: Any, field_name: str) -> Optional[date]:
    """Parse an ISO date; unparseable input is logged and treated as absent"""
    if value is None or isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        logger.warning(f"Ignoring invalid date for {field_name}: {text!r}")
        return None


def parse_optional_float(value: Any, field_name: str) -> Optional[float]:
    """Parse a finite float; unparseable input is logged and treated as absent"""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid number for {field_name}: {value!r}")
        return None
    if not math.isfinite(number):
        logger.warning(f"Ignoring non-finite number for {field_name}: {value!r}")
        return None
    return number
