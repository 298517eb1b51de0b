"""
Unit Tests: Search Predicates
=============================

Tests covering:
1. Predicate construction from optional filters
2. Geographic bounding boxes
3. MongoDB filter compilation
4. Escaping of user text
"""

import pytest
from datetime import date, datetime, time

from artifact_search.schemas.search import GeoQuery, SearchFilters
from artifact_search.search.geo import GeoBox, bounding_box
from artifact_search.search.predicates import (
    AllOf, AnyOf, Contains, Equals, NotIn, Range, MATCH_ALL,
    KEYWORD_FIELDS, GLOBAL_KEYWORD_FIELDS, LOCATION_FIELDS,
    build_filter_predicate, build_keyword_predicate, conjoin, to_mongo
)
from tests.conftest import make_artifact


class TestConjoin:

    def test_drops_none_and_match_all(self):
        title = Contains("title", "vase")
        assert conjoin(None, MATCH_ALL, title) == title

    def test_flattens_nested_conjunctions(self):
        a, b, c = Contains("title", "a"), Contains("medium", "b"), Equals("_id", "c")
        assert conjoin(AllOf((a, b)), c) == AllOf((a, b, c))

    def test_nothing_left_matches_all(self):
        assert conjoin() == MATCH_ALL
        assert conjoin(None) == MATCH_ALL


class TestBuildFilterPredicate:

    def test_no_filters_is_match_all(self):
        assert build_filter_predicate(SearchFilters()) == MATCH_ALL

    def test_blank_values_add_no_constraint(self):
        filters = SearchFilters(title="  ", culture="", any_field="\t")
        assert build_filter_predicate(filters) == MATCH_ALL

    def test_values_are_trimmed(self):
        assert build_filter_predicate(SearchFilters(title="  vase ")) == Contains("title", "vase")

    def test_keyword_is_anded_with_structured_filters(self):
        predicate = build_filter_predicate(SearchFilters(title="vase", any_field="bronze"))

        assert isinstance(predicate, AllOf)
        assert predicate.predicates[0] == Contains("title", "vase")
        keyword = predicate.predicates[1]
        assert keyword == AnyOf(tuple(Contains(f, "bronze") for f in KEYWORD_FIELDS))

    def test_keyword_fields_exclude_tags(self):
        assert "tags" not in KEYWORD_FIELDS
        assert "tags" in GLOBAL_KEYWORD_FIELDS

    def test_date_range_bounds_are_whole_days(self):
        filters = SearchFilters(from_date=date(1900, 1, 1), to_date=date(1950, 12, 31))

        assert build_filter_predicate(filters) == Range(
            "exact_found_date",
            datetime.combine(date(1900, 1, 1), time.min),
            datetime.combine(date(1950, 12, 31), time.max)
        )

    def test_open_ended_date_range(self):
        predicate = build_filter_predicate(SearchFilters(to_date=date(1950, 1, 1)))
        assert predicate.lower is None
        assert to_mongo(predicate) == {"exact_found_date": {"$lte": datetime.combine(date(1950, 1, 1), time.max)}}

    def test_location_query_matches_any_location_field(self):
        predicate = build_filter_predicate(SearchFilters(location_query="Anyang"))
        assert predicate == AnyOf(tuple(Contains(f, "Anyang") for f in LOCATION_FIELDS))

    def test_incomplete_geo_adds_no_constraint(self):
        filters = SearchFilters(geo=GeoQuery(latitude=10.0, longitude=20.0))
        assert build_filter_predicate(filters) == MATCH_ALL

    def test_complete_geo_adds_bounding_box(self):
        filters = SearchFilters(geo=GeoQuery(latitude=10.0, longitude=20.0, radius_km=111.0))
        assert build_filter_predicate(filters) == GeoBox(9.0, 11.0, 19.0, 21.0)


class TestBoundingBox:

    def test_radius_converted_with_km_per_degree(self):
        box = bounding_box(0.0, 0.0, 222.0)
        assert box == GeoBox(-2.0, 2.0, -2.0, 2.0)

    def test_custom_km_per_degree(self):
        box = bounding_box(0.0, 0.0, 100.0, km_per_degree=100.0)
        assert box.max_latitude == pytest.approx(1.0)

    @pytest.mark.parametrize("latitude,longitude,radius", [
        (None, 20.0, 5.0),
        (10.0, None, 5.0),
        (10.0, 20.0, None),
        (10.0, 20.0, -1.0),
    ])
    def test_missing_or_negative_input_gives_none(self, latitude, longitude, radius):
        assert bounding_box(latitude, longitude, radius) is None

    def test_zero_radius_is_a_point(self):
        assert bounding_box(10.0, 20.0, 0.0) == GeoBox(10.0, 10.0, 20.0, 20.0)


class TestGlobalKeywordPredicate:

    def test_blank_text_matches_all(self):
        assert build_keyword_predicate(None) == MATCH_ALL
        assert build_keyword_predicate("   ") == MATCH_ALL

    def test_text_searches_tags_too(self):
        predicate = build_keyword_predicate("ritual")
        assert Contains("tags", "ritual") in predicate.predicates


class TestToMongo:

    def test_contains_is_escaped_case_insensitive_regex(self):
        assert to_mongo(Contains("title", "a.b*")) == {
            "title": {"$regex": r"a\.b\*", "$options": "i"}
        }

    def test_geo_box_bounds_inclusive(self):
        assert to_mongo(GeoBox(1.0, 2.0, 3.0, 4.0)) == {
            "$and": [
                {"location.latitude": {"$gte": 1.0, "$lte": 2.0}},
                {"location.longitude": {"$gte": 3.0, "$lte": 4.0}},
            ]
        }

    def test_not_in_sorted_ids(self):
        assert to_mongo(NotIn("_id", frozenset({"b", "a"}))) == {"_id": {"$nin": ["a", "b"]}}

    def test_empty_not_in_is_no_constraint(self):
        assert to_mongo(NotIn("_id", frozenset())) == {}

    def test_match_all_is_empty_filter(self):
        assert to_mongo(MATCH_ALL) == {}

    def test_single_conjunct_is_unwrapped(self):
        assert to_mongo(AllOf((Equals("_id", "x"), NotIn("_id", frozenset())))) == {"_id": "x"}

    def test_empty_disjunction_rejected(self):
        with pytest.raises(ValueError):
            to_mongo(AnyOf(()))

    def test_unknown_predicate_rejected(self):
        with pytest.raises(TypeError):
            to_mongo("title = 'x'")


class TestCompiledFiltersOnStore:
    """Compiled filters evaluated by mongomock"""

    @pytest.fixture
    def collection(self, artifact_collection):
        artifact_collection.insert_many([
            make_artifact("a1", title="Vase (large)", location={"latitude": 11.0, "longitude": 20.0}),
            make_artifact("a2", title="Bowl", location={"latitude": 11.0001, "longitude": 20.0}),
            make_artifact("a3", title="VASE fragment", location={"latitude": 9.0, "longitude": 21.0}),
            make_artifact("a4", title="Cup", location={}),
        ])
        return artifact_collection

    def ids(self, collection, predicate):
        return sorted(doc["_id"] for doc in collection.find(to_mongo(predicate)))

    def test_regex_metacharacters_match_literally(self, collection):
        assert self.ids(collection, Contains("title", "(large)")) == ["a1"]
        assert self.ids(collection, Contains("title", ".*")) == []

    def test_contains_ignores_case(self, collection):
        assert self.ids(collection, Contains("title", "vase")) == ["a1", "a3"]

    def test_geo_boundary_inclusive(self, collection):
        box = bounding_box(10.0, 20.0, 111.0)
        # a1 sits exactly on the northern edge, a2 just past it
        assert self.ids(collection, box) == ["a1", "a3"]

    def test_documents_without_coordinates_never_match_geo(self, collection):
        box = bounding_box(10.0, 20.0, 100000.0)
        assert "a4" not in self.ids(collection, box)
