"""
Artifact search predicates

A small closed set of predicate values, a builder that assembles them from
optional filter input, and a compiler turning them into MongoDB filter
documents. User text only ever reaches the store as an escaped literal.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from functools import singledispatch
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union
import re

from artifact_search.schemas.search import SearchFilters
from .geo import GeoBox, bounding_box, LATITUDE, LONGITUDE


# Document field names in the artifact store
ID_FIELD = "_id"
TITLE = "title"
DESCRIPTION = "description"
CATEGORY = "category"
CULTURE = "culture"
DEPARTMENT = "department"
PERIOD = "period"
MEDIUM = "medium"
ARTIST_NAME = "artist_name"
TAGS = "tags"
FOUND_DATE = "exact_found_date"
PLACENAME = "location.placename"
CITY = "location.city"
COUNTRY = "location.country"

KEYWORD_FIELDS: Tuple[str, ...] = (TITLE, DESCRIPTION, CULTURE, DEPARTMENT, PERIOD, MEDIUM, ARTIST_NAME)
GLOBAL_KEYWORD_FIELDS: Tuple[str, ...] = KEYWORD_FIELDS + (TAGS,)
LOCATION_FIELDS: Tuple[str, ...] = (PLACENAME, CITY, COUNTRY)


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match; on list fields any element may match"""
    field: str
    value: str


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class Range:
    """Inclusive range; a None bound leaves that side open"""
    field: str
    lower: Any = None
    upper: Any = None


@dataclass(frozen=True)
class NotIn:
    field: str
    values: FrozenSet[str]


@dataclass(frozen=True)
class AnyOf:
    predicates: Tuple["Predicate", ...]


@dataclass(frozen=True)
class AllOf:
    """Conjunction; with no members it matches every document"""
    predicates: Tuple["Predicate", ...] = ()


Predicate = Union[Contains, Equals, Range, GeoBox, NotIn, AnyOf, AllOf]

MATCH_ALL = AllOf()


def has_text(value: Optional[str]) -> bool:
    return value is not None and bool(str(value).strip())


def conjoin(*predicates: Optional[Predicate]) -> Predicate:
    """AND together the given predicates, dropping None and match-all members"""
    members: List[Predicate] = []
    for predicate in predicates:
        if predicate is None or predicate == MATCH_ALL:
            continue
        if isinstance(predicate, AllOf):
            members.extend(predicate.predicates)
        else:
            members.append(predicate)
    if len(members) == 1:
        return members[0]
    return AllOf(tuple(members))


class PredicateBuilder:
    """
    Accumulates conjuncts from optional filter values.

    Absent or blank values add nothing. A keyword adds a single disjunction
    over the keyword fields that is ANDed with every structured conjunct.
    """

    def __init__(self):
        self._conjuncts: List[Predicate] = []
        self._keyword: Optional[AnyOf] = None

    def contains(self, field: str, value: Optional[str]) -> "PredicateBuilder":
        if has_text(value):
            self._conjuncts.append(Contains(field, value.strip()))
        return self

    def contains_any(self, fields: Sequence[str], value: Optional[str]) -> "PredicateBuilder":
        if has_text(value):
            text = value.strip()
            self._conjuncts.append(AnyOf(tuple(Contains(f, text) for f in fields)))
        return self

    def date_range(self, field: str, start: Optional[date], end: Optional[date]) -> "PredicateBuilder":
        if start is None and end is None:
            return self
        lower = datetime.combine(start, time.min) if start is not None else None
        upper = datetime.combine(end, time.max) if end is not None else None
        self._conjuncts.append(Range(field, lower, upper))
        return self

    def keyword(self, value: Optional[str], fields: Sequence[str] = KEYWORD_FIELDS) -> "PredicateBuilder":
        if has_text(value):
            text = value.strip()
            self._keyword = AnyOf(tuple(Contains(f, text) for f in fields))
        return self

    def add(self, predicate: Optional[Predicate]) -> "PredicateBuilder":
        if predicate is not None:
            self._conjuncts.append(predicate)
        return self

    def build(self) -> Predicate:
        return conjoin(*self._conjuncts, self._keyword)


def build_filter_predicate(filters: SearchFilters, km_per_degree: float = 111.0) -> Predicate:
    """Translate structured search filters into one artifact predicate"""
    geo = filters.geo
    return (
        PredicateBuilder()
        .contains(TITLE, filters.title)
        .contains(CATEGORY, filters.category)
        .contains(CULTURE, filters.culture)
        .contains(DEPARTMENT, filters.department)
        .contains(PERIOD, filters.period)
        .contains(MEDIUM, filters.medium)
        .contains(ARTIST_NAME, filters.artist_name)
        .contains(TAGS, filters.tags)
        .date_range(FOUND_DATE, filters.from_date, filters.to_date)
        .contains_any(LOCATION_FIELDS, filters.location_query)
        .contains(CITY, filters.city)
        .contains(COUNTRY, filters.country)
        .add(bounding_box(geo.latitude, geo.longitude, geo.radius_km, km_per_degree))
        .keyword(filters.any_field)
        .build()
    )


def build_keyword_predicate(text: Optional[str]) -> Predicate:
    """Predicate of the global keyword search; blank text matches everything"""
    return PredicateBuilder().keyword(text, GLOBAL_KEYWORD_FIELDS).build()


# MongoDB compilation

@singledispatch
def to_mongo(predicate) -> Dict[str, Any]:
    raise TypeError(f"Unsupported predicate type: {type(predicate).__name__}")


@to_mongo.register
def _(predicate: Contains) -> Dict[str, Any]:
    return {predicate.field: {"$regex": re.escape(predicate.value), "$options": "i"}}


@to_mongo.register
def _(predicate: Equals) -> Dict[str, Any]:
    return {predicate.field: predicate.value}


@to_mongo.register
def _(predicate: Range) -> Dict[str, Any]:
    bounds: Dict[str, Any] = {}
    if predicate.lower is not None:
        bounds["$gte"] = predicate.lower
    if predicate.upper is not None:
        bounds["$lte"] = predicate.upper
    if not bounds:
        return {}
    return {predicate.field: bounds}


@to_mongo.register
def _(predicate: GeoBox) -> Dict[str, Any]:
    return {
        "$and": [
            {LATITUDE: {"$gte": predicate.min_latitude, "$lte": predicate.max_latitude}},
            {LONGITUDE: {"$gte": predicate.min_longitude, "$lte": predicate.max_longitude}},
        ]
    }


@to_mongo.register
def _(predicate: NotIn) -> Dict[str, Any]:
    if not predicate.values:
        return {}
    return {predicate.field: {"$nin": sorted(predicate.values)}}


@to_mongo.register
def _(predicate: AnyOf) -> Dict[str, Any]:
    if not predicate.predicates:
        raise ValueError("AnyOf requires at least one member")
    return {"$or": [to_mongo(p) for p in predicate.predicates]}


@to_mongo.register
def _(predicate: AllOf) -> Dict[str, Any]:
    clauses = [c for c in (to_mongo(p) for p in predicate.predicates) if c]
    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}

